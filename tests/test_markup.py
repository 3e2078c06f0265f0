"""Tests for Markdown formatting toggles."""

import pytest

from floatnote.format.markup import apply_format


def test_bold_wraps_selection():
    """Bold wraps the selection and puts the cursor after the markup."""
    result = apply_format("hello world", 0, 5, "bold")
    assert result.text == "**hello** world"
    assert result.cursor == 9
    assert result.selection_start == result.selection_end


@pytest.mark.parametrize(
    "fmt,wrapped",
    [
        ("bold", "**hello**"),
        ("italic", "*hello*"),
        ("underline", "__hello__"),
        ("code", "`hello`"),
        ("link", "[hello](url)"),
        ("image", "![hello](image-url)"),
    ],
)
def test_wrap_then_unwrap_restores_text(fmt, wrapped):
    """Applying a wrap format to its own output removes it again."""
    text = "say hello now"
    first = apply_format(text, 4, 9, fmt)
    assert first.text == f"say {wrapped} now"

    second = apply_format(first.text, 4, 4 + len(wrapped), fmt)
    assert second.text == text
    assert (second.selection_start, second.selection_end) == (4, 9)


def test_unwrap_when_markers_surround_selection():
    """Selecting just the inner text of **x** still toggles bold off."""
    result = apply_format("a **bold** b", 4, 8, "bold")
    assert result.text == "a bold b"
    assert (result.selection_start, result.selection_end) == (2, 6)


def test_italic_on_bold_text_adds_italic():
    """Italic does not eat one star of a bold span."""
    result = apply_format("**x**", 0, 5, "italic")
    assert result.text == "***x***"

    back = apply_format(result.text, 0, 7, "italic")
    assert back.text == "**x**"


def test_bold_inside_bold_italic():
    """Bold comes off ***x*** leaving italic."""
    result = apply_format("***x***", 0, 7, "bold")
    assert result.text == "*x*"


def test_italic_around_bold_selection_wraps():
    """Selecting the inner text of **x** and applying italic wraps it."""
    result = apply_format("**hello**", 2, 7, "italic")
    assert result.text == "***hello***"


def test_bold_across_two_spans_wraps():
    """Markers from two separate bold spans are not treated as one pair."""
    text = "**a** and **b**"
    result = apply_format(text, 0, 15, "bold")
    assert result.text == "****a** and **b****"

    inside = apply_format(text, 2, 13, "bold")
    assert inside.text == "****a** and **b****"


def test_code_across_two_spans_wraps():
    """Two code spans selected together get wrapped, not merged."""
    result = apply_format("`a` and `b`", 0, 11, "code")
    assert result.text == "``a` and `b``"


def test_italic_across_two_spans_wraps():
    """A lone star inside the selection keeps italic from unwrapping."""
    result = apply_format("*a* and *b*", 0, 11, "italic")
    assert result.text == "**a* and *b**"


def test_underline_html_style():
    """Underline can use <u> tags."""
    result = apply_format("hi there", 0, 2, "underline", underline="html")
    assert result.text == "<u>hi</u> there"
    back = apply_format(result.text, 0, 9, "underline", underline="html")
    assert back.text == "hi there"


def test_link_unwrap_from_label_selection():
    """Selecting the label of a link removes the link."""
    text = "see [docs](http://x) here"
    result = apply_format(text, 5, 9, "link")
    assert result.text == "see docs here"


def test_link_does_not_unwrap_image():
    """An image is not treated as a link."""
    text = "![pic](a.png)"
    result = apply_format(text, 2, 5, "link")
    assert result.text == "![[pic](url)](a.png)"


@pytest.mark.parametrize("fmt", ["bold", "italic", "underline", "code", "link", "image"])
def test_wrap_formats_need_selection(fmt):
    """Without a selection wrap formats change nothing."""
    result = apply_format("hello", 2, 2, fmt)
    assert result.text == "hello"
    assert result.cursor == 2


def test_unknown_format_is_noop():
    """Unsupported ids never raise."""
    result = apply_format("hello", 0, 5, "strikethrough")
    assert result.text == "hello"
    assert (result.selection_start, result.selection_end) == (0, 5)


def test_offsets_are_clamped_and_ordered():
    """Reversed or out-of-range selections are normalized."""
    result = apply_format("hello", 99, 0, "bold")
    assert result.text == "**hello**"


def test_bullet_strips_existing_bullet():
    """A '- ' line loses its bullet."""
    result = apply_format("- item one", 4, 4, "bullet")
    assert result.text == "item one"
    assert result.cursor == 2


def test_bullet_adds_after_indent():
    """Bullets go after leading whitespace."""
    text = "first\n  second\nthird"
    result = apply_format(text, 9, 9, "bullet")
    assert result.text == "first\n  - second\nthird"
    assert result.cursor == 11


def test_bullet_strip_keeps_indent():
    """Removing a bullet keeps leading whitespace."""
    result = apply_format("    - nested", 0, 0, "bullet")
    assert result.text == "    nested"


def test_bullet_on_empty_line():
    """A bullet can start on an empty line."""
    result = apply_format("", 0, 0, "bullet")
    assert result.text == "- "
    assert result.cursor == 2


def test_bullet_multi_line_skips_blank_lines():
    """Each non-blank selected line toggles on its own."""
    text = "one\n\n- two\nthree\nafter"
    end = text.index("three") + len("three")
    result = apply_format(text, 0, end, "bullet")
    assert result.text == "- one\n\ntwo\n- three\nafter"


def test_multi_line_selection_ending_at_line_start():
    """A selection ending right after a newline leaves the next line alone."""
    text = "a\nb\nc"
    result = apply_format(text, 0, 4, "bullet")
    assert result.text == "- a\n- b\nc"


def test_number_toggle():
    """Numbered lists add '1. ' and strip any 'N. '."""
    assert apply_format("task", 0, 0, "number").text == "1. task"
    assert apply_format("12. task", 0, 0, "number").text == "task"


def test_number_multi_line():
    """Every selected line gets numbered."""
    text = "a\nb"
    assert apply_format(text, 0, 3, "number").text == "1. a\n1. b"


def test_heading_adds_prefix():
    """h2 prefixes the current line."""
    text = "intro\ntitle\nbody"
    result = apply_format(text, 8, 8, "h2")
    assert result.text == "intro\n## title\nbody"
    assert result.cursor == 11


def test_heading_replaces_other_level():
    """A different level replaces the old prefix."""
    assert apply_format("### title", 0, 0, "h1").text == "# title"


def test_heading_same_level_toggles_off():
    """The same level removes the prefix."""
    result = apply_format("## title", 5, 5, "h2")
    assert result.text == "title"
    assert result.cursor == 2


def test_indent_and_outdent():
    """Tab indents touched lines by two spaces; Shift+Tab undoes it."""
    text = "- a\n- b"
    indented = apply_format(text, 0, len(text), "indent")
    assert indented.text == "  - a\n  - b"

    outdented = apply_format(indented.text, indented.selection_start, indented.selection_end, "outdent")
    assert outdented.text == text


def test_outdent_tab_and_unindented():
    """Outdent removes one tab, and leaves flush lines alone."""
    assert apply_format("\tx", 0, 0, "outdent").text == "x"
    assert apply_format("x", 0, 0, "outdent").text == "x"


def test_divider_after_line():
    """A divider is separated from text by a blank line."""
    result = apply_format("text\nnext", 2, 2, "divider")
    assert result.text == "text\n\n---\n\nnext"
    assert result.cursor == len("text\n\n---\n")


def test_divider_on_blank_line():
    """A blank line becomes the divider."""
    result = apply_format("a\n\nb", 2, 2, "divider")
    assert result.text == "a\n\n---\nb"
    assert result.cursor == 6

    assert apply_format("", 0, 0, "divider").text == "---"
