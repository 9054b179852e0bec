"""CLI entry point for ccs.

Scans Claude Code transcripts, opens the interactive picker and hands the
chosen conversation to ``claude --resume``.

Heavy ccs.* imports (the Textual app in particular) are lazy so that
``ccs --help`` stays fast.

Usage:
    ccs                         # search and resume a conversation
    ccs auth --days 7           # start with query "auth", last week only
    ccs -y                      # resume with --dangerously-skip-permissions
    ccs --dump                  # print the parsed index as JSON
    ccs --preview <id> [query]  # print one conversation's preview
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import shutil
import sys
from datetime import datetime, timedelta, timezone

logger = logging.getLogger(__name__)

# Short flags expanded before being passed to the resume program.
FLAG_ALIASES = {
    "-y": "--dangerously-skip-permissions",
}


def _version() -> str:
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("ccs")
    except PackageNotFoundError:
        return "0.0.0"


def _json_out(obj) -> None:
    """Print JSON to stdout."""
    json.dump(obj, sys.stdout, indent=2)
    print()


def _fail(message: str) -> None:
    print(message, file=sys.stderr)
    raise SystemExit(1)


def _configure_logging() -> None:
    from ccs.paths import CACHE_DIR

    CACHE_DIR.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(CACHE_DIR / "ccs.log"),
        level=logging.DEBUG,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def split_extra_args(extra: list[str]) -> tuple[list[str], list[str]]:
    """Split unrecognised arguments into (resume flags, extra query words)."""
    flags: list[str] = []
    words: list[str] = []
    for arg in extra:
        if arg.startswith("-"):
            flags.append(FLAG_ALIASES.get(arg, arg))
        else:
            words.append(arg)
    return flags, words


def scan_settings(args: argparse.Namespace, config: dict) -> tuple[str, datetime | None, int]:
    """Resolve (root, age cutoff, max size in bytes) from flags over config."""
    from ccs.config import projects_dir

    root = os.path.expanduser(args.dir or projects_dir(config))
    if args.all:
        return root, None, 0

    days = args.days if args.days is not None else config["max_age_days"]
    size_mb = args.max_size if args.max_size is not None else config["max_size_mb"]

    cutoff = datetime.now(tz=timezone.utc) - timedelta(days=days) if days else None
    max_size = int(size_mb * 1024 * 1024) if size_mb else 0
    return root, cutoff, max_size


def cmd_dump(conversations, items) -> None:
    """Print the parsed index as JSON."""
    out = []
    for item in items:
        c = item.conversation
        out.append({
            "session_id": c.session_id,
            "cwd": c.cwd,
            "first_timestamp": c.first_timestamp,
            "last_timestamp": c.last_timestamp,
            "file_path": c.file_path,
            "message_count": len(c.messages),
            "search_text": item.search_text,
        })
    _json_out({"total": len(conversations), "conversations": out})


def cmd_preview(session_id: str, query: str) -> None:
    """Render one conversation's preview from the cache to stdout."""
    from rich.console import Console

    from ccs.cache import load_cache
    from ccs.preview import FULL_PREVIEW_CHARS, render_preview

    conversations = load_cache()
    if conversations is None:
        _fail("Cache not found. Run 'ccs' once to build it.")
    conv = conversations.get(session_id)
    if conv is None:
        _fail(f"Conversation '{session_id}' not found in cache.")

    console = Console(highlight=False)
    lines = render_preview(conv, query, height=sys.maxsize, max_chars=FULL_PREVIEW_CHARS)
    console.print("\n".join(lines))


def resume(conv, flags: list[str], command: str = "claude") -> None:
    """Replace this process with ``<command> --resume <id> [flags...]`` in the conversation's cwd."""
    cwd = conv.cwd
    if not cwd or cwd == "unknown":
        cwd = "."

    binary_path = shutil.which(command)
    if binary_path is None:
        _fail(f"'{command}' not found on PATH.")

    print(f"Resuming conversation {conv.session_id} in {cwd}...")
    if flags:
        print(f"Flags: {' '.join(flags)}")
    print()

    try:
        os.chdir(cwd)
    except OSError as exc:
        print(f"Warning: could not change to directory {cwd}: {exc}", file=sys.stderr)

    sys.stdout.flush()
    os.execvp(binary_path, [command, "--resume", conv.session_id, *flags])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ccs",
        description=(
            "Search and resume Claude Code conversations.\n\n"
            "Type to filter, Enter to resume, Ctrl+D to delete, Esc to quit.\n"
            "Any other flags are passed through to 'claude --resume'\n"
            "(use --flag=value for flags that take a value)."
        ),
        epilog=(
            "Examples:\n"
            "  ccs                                 Search and resume a conversation\n"
            "  ccs --dangerously-skip-permissions  Resume with auto-accept permissions\n"
            "  ccs -y                              Same as above (short flag)\n"
            "  ccs --days 7 docker                 Last week only, filtered by 'docker'"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    parser.add_argument(
        "query",
        nargs="?",
        default="",
        help="Initial search query",
    )
    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"ccs v{_version()}",
    )
    parser.add_argument(
        "--days",
        type=int,
        metavar="N",
        help="Only include conversations modified in the last N days (0: no limit)",
    )
    parser.add_argument(
        "--max-size",
        type=float,
        metavar="MB",
        help="Skip transcript files larger than MB megabytes (0: no limit)",
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="Ignore age and size limits",
    )
    parser.add_argument(
        "--dir",
        metavar="PATH",
        help="Transcript root (default: ~/.claude/projects)",
    )
    parser.add_argument(
        "--dump",
        action="store_true",
        help="Print the parsed conversations as JSON and exit",
    )
    parser.add_argument(
        "--preview",
        nargs="+",
        metavar="ARG",
        help="Print the preview for SESSION_ID [QUERY] from the cache and exit",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Write a debug log to the cache directory",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args, extra = parser.parse_known_args(argv)
    flags, words = split_extra_args(extra)
    query = " ".join([w for w in [args.query, *words] if w])

    if args.debug:
        _configure_logging()

    if args.preview:
        session_id = args.preview[0]
        preview_query = " ".join(args.preview[1:])
        cmd_preview(session_id, preview_query)
        return

    from ccs.config import load_config
    from ccs.exceptions import ProjectsDirNotFoundError
    from ccs.index import build_items
    from ccs.scanner import scan_conversations

    config = load_config()
    root, cutoff, max_size = scan_settings(args, config)
    logger.debug("scanning %s (cutoff=%s, max_size=%d)", root, cutoff, max_size)

    print("Loading conversations...", end="", file=sys.stderr, flush=True)
    try:
        conversations = scan_conversations(root, cutoff, max_size)
    except ProjectsDirNotFoundError as exc:
        print("\r", end="", file=sys.stderr)
        _fail(
            f"{exc}\n"
            "Make sure Claude Code is installed and has been used at least once."
        )
    print("\r                        \r", end="", file=sys.stderr, flush=True)

    if not conversations:
        _fail("No conversations found")

    items = build_items(conversations)

    if args.dump:
        cmd_dump(conversations, items)
        return

    from ccs.cache import save_cache

    try:
        save_cache(conversations)
    except OSError as exc:
        print(f"Warning: could not save cache: {exc}", file=sys.stderr)

    from ccs.app import tui_main

    selected = tui_main(items, query)
    if selected is None:
        return

    resume(selected, flags, config["resume_command"])


if __name__ == "__main__":
    main()
