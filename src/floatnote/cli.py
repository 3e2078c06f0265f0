"""CLI for floatnote - slash commands and AI prompts for Markdown notes."""

import argparse
import asyncio
import json
import platform
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .core.commands import filter_commands, is_known_token
from .core.context import build_ai_prompt_from_command, extract_context, splice_ai_response
from .core.detect import detect_slash_command
from .core.headings import extract_headings
from .format.markup import FORMAT_IDS, apply_format
from .logs import configure_logging
from .runtime import build_runtime


def _read(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _write(path: str, text: str) -> None:
    Path(path).write_text(text, encoding="utf-8")


def cmd_commands(args: argparse.Namespace, rt: Any) -> int:
    """List slash-menu commands matching a filter."""
    matches = filter_commands(args.filter or "")
    if args.json:
        print(json.dumps([{"id": c.id, "label": c.label, "description": c.description}
                          for c in matches], indent=2))
        return 0
    for c in matches:
        print(f"{c.id:<18} {c.label:<16} {c.description}")
    return 0


def cmd_detect(args: argparse.Namespace, rt: Any) -> int:
    """Report the slash command at the end of a line."""
    match = detect_slash_command(args.line, is_known=is_known_token)
    if match is None:
        if not args.quiet:
            print("No command", file=sys.stderr)
        return 1
    if args.json:
        print(json.dumps({"command": match.command, "full_text": match.full_text}))
    else:
        print(f"{match.command}\t{match.full_text}")
    return 0


def cmd_format(args: argparse.Namespace, rt: Any) -> int:
    """Apply a format to a file's selection."""
    text = _read(args.file)
    end = args.start if args.end is None else args.end
    result = apply_format(text, args.start, end, args.format,
                          underline=rt.config.format.underline)

    if args.write and args.file != "-":
        _write(args.file, result.text)
        if not args.quiet:
            print(f"Selection: {result.selection_start}-{result.selection_end}")
        return 0
    print(result.text, end="")
    return 0


def cmd_headings(args: argparse.Namespace, rt: Any) -> int:
    """List the heading sections of a file."""
    sections = extract_headings(_read(args.file))
    if args.json:
        print(json.dumps([
            {"level": s.level, "title": s.title, "content": s.content,
             "start_offset": s.start_offset, "end_offset": s.end_offset}
            for s in sections
        ], indent=2))
        return 0
    for s in sections:
        print(f"{'  ' * (s.level - 1)}{'#' * s.level} {s.title}  [{s.start_offset}:{s.end_offset}]")
    return 0


def cmd_context(args: argparse.Namespace, rt: Any) -> int:
    """Print the augmented prompt for a query against a file."""
    result = extract_context(_read(args.file), args.query, scope=rt.config.context.scope)
    if not args.quiet and result.describe():
        print(result.describe(), file=sys.stderr)
    print(result.augmented_prompt)
    return 0


def cmd_send(args: argparse.Namespace, rt: Any) -> int:
    """Send the AI command on the cursor's line and splice the answer in."""
    text = _read(args.file)
    cursor = len(text) if args.cursor is None else args.cursor
    plan = build_ai_prompt_from_command(text, cursor, args.command, scope=rt.config.context.scope)
    if plan is None:
        print("Error: empty prompt, nothing sent", file=sys.stderr)
        return 1

    if args.dry_run:
        print(plan.prompt)
        return 0

    if not args.quiet and plan.context and plan.context.describe():
        print(plan.context.describe(), file=sys.stderr)

    response = asyncio.run(rt.generator.generate(plan.prompt))
    if not response.success:
        print(f"Error: {response.text}", file=sys.stderr)
        if response.error:
            print(f"Details: {response.error}", file=sys.stderr)
        return 1

    result = splice_ai_response(text, response.text, plan.insert_position)
    if args.write and args.file != "-":
        _write(args.file, result.text)
    else:
        print(result.text, end="")
    return 0


def cmd_new(args: argparse.Namespace, rt: Any) -> int:
    """Create a new note."""
    content = _read(args.content) if args.content else ""
    note = rt.store.create(args.title, content, args.tag)
    if not args.quiet:
        print(note.id)
    return 0


def cmd_ls(args: argparse.Namespace, rt: Any) -> int:
    """List notes, most recently updated first."""
    notes = rt.store.list_notes(tag=args.tag, query=args.grep, limit=args.limit)
    if args.json:
        print(json.dumps([
            {"id": n.id, "title": n.title, "tags": n.tags, "updated_at": n.updated_at}
            for n in notes
        ], indent=2))
        return 0
    for n in notes:
        tags = f"  #{' #'.join(n.tags)}" if n.tags else ""
        print(f"{n.id}  {n.updated_at[:19]}  {n.title}{tags}")
    return 0


def cmd_show(args: argparse.Namespace, rt: Any) -> int:
    """Print a note's Markdown content."""
    note = rt.store.get(args.id)
    if note is None:
        print(f"Note {args.id} not found", file=sys.stderr)
        return 1
    print(note.content, end="")
    return 0


def cmd_rm(args: argparse.Namespace, rt: Any) -> int:
    """Delete a note."""
    if not rt.store.delete(args.id):
        print(f"Note {args.id} not found", file=sys.stderr)
        return 1
    if not args.quiet:
        print(f"Deleted {args.id}")
    return 0


def cmd_serve(args: argparse.Namespace, rt: Any) -> int:
    """Start local JSON API server."""
    import uvicorn

    from .api.app import create_app, generate_token

    token_arg = getattr(args, 'token', 'auto')
    token = None

    if token_arg == 'auto':
        token = generate_token()
        print(f"Generated bearer token: {token}")
        print(f"Use in requests: Authorization: Bearer {token}")
    elif token_arg == 'none':
        print("Warning: Running without authentication. Only use in trusted environments.")
        token = None
    else:
        token = token_arg

    app = create_app(rt, token=token, enable_cors=args.cors)

    host = args.host or rt.config.server.host
    port = args.port or rt.config.server.port

    print(f"Starting server on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level=rt.config.log.level.lower())
    return 0


def version_string() -> str:
    return (
        f"floatnote {__version__}\n"
        f"python {platform.python_version()}\n"
        f"platform {platform.platform()}"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fnote", description="floatnote CLI"
    )
    parser.add_argument(
        "--version", action="version", version=version_string()
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/floatnote.toml, notes/floatnote.toml)",
    )
    parser.add_argument(
        "--notes",
        type=Path,
        default=None,
        help="Path to notes directory (overrides config)",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "--json", action="store_true", help="Machine-readable output"
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    parser_commands = subparsers.add_parser("commands", help="List slash-menu commands")
    parser_commands.add_argument("filter", nargs="?", default="", help="Filter, e.g. /bo")

    parser_detect = subparsers.add_parser("detect", help="Detect a slash command in a line")
    parser_detect.add_argument("line", help="Line text up to the cursor")

    parser_format = subparsers.add_parser("format", help="Apply a format to a selection")
    parser_format.add_argument("file", help="Markdown file ('-' for stdin)")
    parser_format.add_argument("--format", "-f", required=True, choices=FORMAT_IDS)
    parser_format.add_argument("--start", type=int, default=0, help="Selection start")
    parser_format.add_argument("--end", type=int, default=None, help="Selection end (default: start)")
    parser_format.add_argument("--write", "-w", action="store_true", help="Rewrite the file in place")

    parser_headings = subparsers.add_parser("headings", help="List heading sections")
    parser_headings.add_argument("file", help="Markdown file ('-' for stdin)")

    parser_context = subparsers.add_parser("context", help="Build a context-augmented prompt")
    parser_context.add_argument("file", help="Markdown file ('-' for stdin)")
    parser_context.add_argument("query", help='Query, e.g. \'summarize h1\' or \'explain "Intro"\'')

    parser_send = subparsers.add_parser("send", help="Run an AI command and splice the answer")
    parser_send.add_argument("file", help="Markdown file ('-' for stdin)")
    parser_send.add_argument("--cursor", type=int, default=None, help="Cursor offset (default: end)")
    parser_send.add_argument("--command", default=None, help='Command text, e.g. \'/send explain "Intro"\'')
    parser_send.add_argument("--write", "-w", action="store_true", help="Rewrite the file in place")
    parser_send.add_argument("--dry-run", action="store_true", help="Print the prompt, send nothing")

    parser_new = subparsers.add_parser("new", help="Create a new note")
    parser_new.add_argument("--title", required=True, help="Note title")
    parser_new.add_argument("--tag", action="append", default=[], help="Tag (repeatable)")
    parser_new.add_argument("--content", default=None, help="File with initial content ('-' for stdin)")

    parser_ls = subparsers.add_parser("ls", help="List recent notes")
    parser_ls.add_argument("--tag", default=None, help="Only notes with this tag")
    parser_ls.add_argument("--grep", default=None, help="Search title, content and tags")
    parser_ls.add_argument("--limit", type=int, default=None, help="Maximum notes")

    parser_show = subparsers.add_parser("show", help="Print a note's content")
    parser_show.add_argument("id", help="Note ID")

    parser_rm = subparsers.add_parser("rm", help="Delete a note")
    parser_rm.add_argument("id", help="Note ID")

    parser_serve = subparsers.add_parser("serve", help="Start local JSON API server")
    parser_serve.add_argument("--host", default=None, help="Host (default from config)")
    parser_serve.add_argument("--port", type=int, default=None, help="Port (default from config)")
    parser_serve.add_argument(
        "--token", default="auto",
        help="Bearer token: 'auto' to generate, 'none' to disable, or a literal token",
    )
    parser_serve.add_argument("--cors", action="store_true", help="Enable CORS")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    rt = build_runtime(notes_path=args.notes, config_path=args.config)
    configure_logging(rt.config.log.level)

    handlers = {
        "commands": cmd_commands,
        "detect": cmd_detect,
        "format": cmd_format,
        "headings": cmd_headings,
        "context": cmd_context,
        "send": cmd_send,
        "new": cmd_new,
        "ls": cmd_ls,
        "show": cmd_show,
        "rm": cmd_rm,
        "serve": cmd_serve,
    }

    handler = handlers.get(args.cmd)
    if handler:
        try:
            exit_code = handler(args, rt)
            sys.exit(exit_code)
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
