"""Concurrent discovery of transcripts under the projects directory."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from ccs.exceptions import ProjectsDirNotFoundError
from ccs.models import Conversation
from ccs.parser import TRANSCRIPT_SUFFIX, is_agent_transcript, parse_conversation_file

logger = logging.getLogger(__name__)

# Ceiling on simultaneously in-flight parses (and open file handles).
MAX_CONCURRENT_PARSES = 20


@dataclass
class ScanStats:
    candidates: int = 0
    parsed: int = 0
    skipped: int = 0
    failed: int = 0


def find_transcripts(root: str | Path) -> list[Path]:
    """Recursively list transcript files under *root*, skipping agent files.

    Unreadable subdirectories are skipped rather than aborting the walk.
    """
    found: list[Path] = []

    def _on_error(exc: OSError) -> None:
        logger.debug("skipping unreadable entry %s: %s", exc.filename, exc)

    for dirpath, _dirnames, filenames in os.walk(root, onerror=_on_error):
        for name in filenames:
            if name.endswith(TRANSCRIPT_SUFFIX) and not is_agent_transcript(name):
                found.append(Path(dirpath) / name)
    return found


def scan_conversations(
    root: str | Path,
    age_cutoff: datetime | None = None,
    max_size: int = 0,
    *,
    max_workers: int = MAX_CONCURRENT_PARSES,
    stats: ScanStats | None = None,
) -> list[Conversation]:
    """Parse every transcript under *root* and return them newest-active first.

    Files are parsed on a pool of at most *max_workers* threads. A file that
    fails (OSError, or any other exception from a hostile file) is logged,
    counted in *stats* and left out; its siblings are unaffected.
    Pass a ScanStats instance to collect counts.
    """
    root = Path(root)
    if not root.is_dir():
        raise ProjectsDirNotFoundError(root)

    if stats is None:
        stats = ScanStats()

    files = find_transcripts(root)
    stats.candidates = len(files)

    def _parse(path: Path) -> Conversation | None | Exception:
        try:
            return parse_conversation_file(path, age_cutoff, max_size)
        except Exception as exc:
            return exc

    conversations: list[Conversation] = []
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        # map() blocks until every file is done and keeps input order.
        for path, result in zip(files, pool.map(_parse, files)):
            if isinstance(result, OSError):
                stats.failed += 1
                logger.warning("could not read %s: %s", path, result)
            elif isinstance(result, Exception):
                stats.failed += 1
                logger.warning("could not parse %s: %r", path, result)
            elif result is None:
                stats.skipped += 1
            else:
                stats.parsed += 1
                conversations.append(result)

    conversations.sort(key=lambda c: c.last_timestamp, reverse=True)
    logger.debug(
        "scanned %s: %d candidates, %d parsed, %d skipped, %d failed",
        root, stats.candidates, stats.parsed, stats.skipped, stats.failed,
    )
    return conversations
