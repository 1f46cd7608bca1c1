#!/usr/bin/env python
"""Main entry point for the Zettel CLI."""
import argparse
import logging
import sys
from typing import Callable, Dict, List, Optional, TextIO

from zettel_cli import __version__
from zettel_cli.completion import bash_completion_script
from zettel_cli.config import ZettelConfig, load_config
from zettel_cli.exceptions import InvalidSelectionError, ZettelError
from zettel_cli.observability import configure_logging
from zettel_cli.services.search_service import SelectionRequest
from zettel_cli.services.zettel_service import ZettelService

logger = logging.getLogger(__name__)

EPILOG = """Environment variables:
  ZETTEL_HOME   Notes directory (default: ~/zettelkasten)
  EDITOR        Preferred text editor (falls back to nano)"""


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all subcommands."""
    parser = argparse.ArgumentParser(
        prog="zettel",
        description="Zettelkasten CLI",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"zettel version {__version__}",
    )
    parser.add_argument(
        "--log-level",
        help="Logging level (default: $ZETTEL_LOG_LEVEL or WARNING)",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        default=None,
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    p = sub.add_parser("new", help="Create a new note, optionally titled")
    p.add_argument("title", nargs="*", help="Note title")
    p.add_argument("--no-edit", action="store_true", help="Do not open the editor")

    p = sub.add_parser("edit", help="Edit an existing note by ID")
    p.add_argument("note_id", metavar="ID")

    p = sub.add_parser("open", help="Open notes by matching filename or content")
    p.add_argument("query", nargs="+")
    p.add_argument(
        "--select", metavar="N", type=int, default=None,
        help="Pick the N-th match without prompting",
    )

    sub.add_parser("list", help="List all notes")

    p = sub.add_parser("search", help="Search note contents and filenames")
    p.add_argument("query", nargs="+")

    p = sub.add_parser("link", help="Link SOURCE to TARGET")
    p.add_argument("source_id", metavar="SOURCE")
    p.add_argument("target_id", metavar="TARGET")

    p = sub.add_parser("index", help="Create an index note from one or more tags")
    p.add_argument("title", metavar="TITLE")
    p.add_argument("tags", metavar="TAG", nargs="*")
    p.add_argument("--no-edit", action="store_true", help="Do not open the editor")

    p = sub.add_parser("tags", help="List all unique tags")
    p.add_argument(
        "tag", nargs="?", default=None,
        help="List IDs of notes carrying TAG (uses the tag index)",
    )
    p.add_argument(
        "--cached", action="store_true",
        help="Read tags from the tag index instead of scanning",
    )

    sub.add_parser("reindex", help="Rebuild the tag index")
    sub.add_parser("completion", help="Generate bash completion script")
    return parser


def _read_choice(stdin: TextIO, request: SelectionRequest) -> str:
    line = stdin.readline()
    if not line:
        raise InvalidSelectionError("<EOF>", len(request.candidates))
    return line.strip()


def cmd_new(service: ZettelService, args, out: TextIO, stdin: TextIO) -> int:
    title = " ".join(args.title).strip() or None
    ref = service.new_note(title=title, edit=not args.no_edit)
    print(ref.filename, file=out)
    return 0


def cmd_edit(service: ZettelService, args, out: TextIO, stdin: TextIO) -> int:
    service.edit_note(args.note_id)
    return 0


def cmd_open(service: ZettelService, args, out: TextIO, stdin: TextIO) -> int:
    result = service.open_notes(" ".join(args.query), choice=args.select)
    if isinstance(result, SelectionRequest):
        print(result.render(), file=out)
        print("Select a note: ", end="", file=out, flush=True)
        service.choose(result, _read_choice(stdin, result))
    return 0


def cmd_list(service: ZettelService, args, out: TextIO, stdin: TextIO) -> int:
    for ref in service.list_notes():
        print(ref.filename, file=out)
    return 0


def cmd_search(service: ZettelService, args, out: TextIO, stdin: TextIO) -> int:
    for ref in service.search(" ".join(args.query)):
        print(ref.id, file=out)
    return 0


def cmd_link(service: ZettelService, args, out: TextIO, stdin: TextIO) -> int:
    service.link_notes(args.source_id, args.target_id)
    print(f"Linked {args.source_id} -> {args.target_id}", file=out)
    return 0


def cmd_index(service: ZettelService, args, out: TextIO, stdin: TextIO) -> int:
    ref = service.build_index(args.title, args.tags, edit=not args.no_edit)
    print(ref.filename, file=out)
    return 0


def cmd_tags(service: ZettelService, args, out: TextIO, stdin: TextIO) -> int:
    if args.tag:
        for note_id in service.find_tagged(args.tag):
            print(note_id, file=out)
        return 0
    tags = service.list_cached_tags() if args.cached else service.list_tags()
    for tag in sorted(tags):
        print(tag, file=out)
    return 0


def cmd_reindex(service: ZettelService, args, out: TextIO, stdin: TextIO) -> int:
    count = service.reindex()
    print(f"Indexed {count} notes", file=out)
    return 0


def cmd_completion(service: ZettelService, args, out: TextIO, stdin: TextIO) -> int:
    print(bash_completion_script(), end="", file=out)
    return 0


COMMANDS: Dict[str, Callable[..., int]] = {
    "new": cmd_new,
    "edit": cmd_edit,
    "open": cmd_open,
    "list": cmd_list,
    "search": cmd_search,
    "link": cmd_link,
    "index": cmd_index,
    "tags": cmd_tags,
    "reindex": cmd_reindex,
    "completion": cmd_completion,
}


def main(
    argv: Optional[List[str]] = None,
    config: Optional[ZettelConfig] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
) -> int:
    """Run one zettel command and return the process exit status.

    Args:
        argv: Arguments without the program name (defaults to sys.argv[1:]).
        config: Pre-resolved configuration; loaded from the environment when None.
        stdin/stdout/stderr: Streams for prompts, output and errors.
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help(file=stderr)
        return 1

    service: Optional[ZettelService] = None
    try:
        if config is None:
            overrides = {"log_level": args.log_level} if args.log_level else {}
            config = load_config(**overrides)
        elif args.log_level:
            config = config.model_copy(update={"log_level": args.log_level})
        try:
            configure_logging(level=config.log_level, log_dir=config.log_dir)
        except OSError as e:
            # Fall back to console-only logging if the log directory is unusable
            configure_logging(level=config.log_level)
            logger.warning(f"Failed to configure file logging: {e}")

        service = ZettelService(config)
        if args.command != "completion":
            service.repository.ensure_directory()
        return COMMANDS[args.command](service, args, stdout, stdin)
    except ZettelError as e:
        logger.debug(f"{args.command} failed: {e}")
        print(f"Error: {e.message}", file=stderr)
        return 1
    except KeyboardInterrupt:
        print("Interrupted", file=stderr)
        return 1
    finally:
        if service is not None:
            service.close()


if __name__ == "__main__":
    sys.exit(main())
