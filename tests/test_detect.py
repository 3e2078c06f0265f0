"""Tests for slash-command detection."""

from floatnote.core.detect import detect_slash_command


def test_detect_command_with_text():
    """A command with trailing text keeps the text in full_text."""
    match = detect_slash_command("/send hi")
    assert match is not None
    assert match.command == "/send"
    assert match.full_text == "/send hi"


def test_detect_ignores_slash_inside_word():
    """Paths and URLs are not commands."""
    assert detect_slash_command("see a/b") is None
    assert detect_slash_command("http://example.com") is None


def test_detect_bare_slash():
    """A lone slash opens the full menu."""
    match = detect_slash_command("some text /")
    assert match is not None
    assert match.command == "/"
    assert match.full_text == "/"
    assert match.start == 10


def test_detect_slash_then_space_closes():
    """Typing a space right after a bare slash is not a command."""
    assert detect_slash_command("/ ") is None
    assert detect_slash_command("note / more") is None


def test_detect_after_text_on_line():
    """Commands may follow other words on the line."""
    match = detect_slash_command('notes here /send explain "Intro"')
    assert match.command == "/send"
    assert match.full_text == '/send explain "Intro"'
    assert match.start == len("notes here ")


def test_detect_trailing_whitespace_trimmed():
    """full_text is trimmed."""
    match = detect_slash_command("/chat   ")
    assert match.command == "/chat"
    assert match.full_text == "/chat"


def test_detect_last_candidate_wins():
    """With two commands on a line the later one is reported."""
    match = detect_slash_command("/bold then /italic")
    assert match.command == "/italic"


def test_detect_free_text_may_contain_slashes():
    """A slash inside the free text does not hide the command."""
    match = detect_slash_command("/send compare a/b")
    assert match.command == "/send"
    assert match.full_text == "/send compare a/b"


def test_detect_nothing():
    """Empty lines and lines without slashes give None."""
    assert detect_slash_command("") is None
    assert detect_slash_command("plain words") is None


def test_detect_prefers_known_command():
    """A path typed after /send does not replace the command."""
    known = {"/send", "/chat"}
    match = detect_slash_command("/send compare /tmp", is_known=known.__contains__)
    assert match.command == "/send"
    assert match.full_text == "/send compare /tmp"


def test_detect_unknown_falls_back_to_last():
    """With nothing accepted the last candidate is still reported."""
    match = detect_slash_command("a /foo b /bar", is_known=lambda token: False)
    assert match.command == "/bar"
