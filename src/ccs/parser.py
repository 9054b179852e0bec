"""Reduce one transcript JSONL file to a Conversation."""

from __future__ import annotations

import json
import os
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from typing import BinaryIO

from ccs.extract import extract_text
from ccs.models import UNKNOWN_CWD, Conversation, Message, Role

TRANSCRIPT_SUFFIX = ".jsonl"
AGENT_PREFIX = "agent-"

# Lines longer than this are dropped instead of buffered.
MAX_LINE_BYTES = 10 * 1024 * 1024


def is_agent_transcript(name: str) -> bool:
    """Sub-agent transcripts are not user sessions."""
    return name.startswith(AGENT_PREFIX)


def session_id_from_name(name: str) -> str:
    if name.endswith(TRANSCRIPT_SUFFIX):
        return name[: -len(TRANSCRIPT_SUFFIX)]
    return name


def _iter_lines(f: BinaryIO, limit: int = MAX_LINE_BYTES) -> Iterator[bytes]:
    """Yield newline-delimited lines, skipping any line longer than *limit*."""
    while True:
        line = f.readline(limit + 1)
        if not line:
            return
        if len(line) > limit and not line.endswith(b"\n"):
            # Discard the rest of the oversized line.
            while True:
                rest = f.readline(limit + 1)
                if not rest or rest.endswith(b"\n"):
                    break
            continue
        yield line


def _admitted(stat: os.stat_result, age_cutoff: datetime | None, max_size: int) -> bool:
    if age_cutoff is not None and stat.st_mtime < age_cutoff.timestamp():
        return False
    if max_size and stat.st_size > max_size:
        return False
    return True


def parse_conversation_file(
    path: str | Path,
    age_cutoff: datetime | None = None,
    max_size: int = 0,
) -> Conversation | None:
    """Parse a transcript file into a Conversation.

    Returns None when the file is filtered out (agent transcript, modified
    before *age_cutoff*, larger than *max_size* bytes) or retains no
    messages. A cutoff of None and a size of 0 mean "no limit". Stat and
    open failures raise OSError.
    """
    path = Path(path)
    if is_agent_transcript(path.name):
        return None

    stat = path.stat()
    if not _admitted(stat, age_cutoff, max_size):
        return None

    conv = Conversation(session_id=session_id_from_name(path.name), cwd="", file_path=str(path))

    with open(path, "rb") as f:
        for raw in _iter_lines(f):
            raw = raw.strip()
            if not raw:
                continue
            try:
                entry = json.loads(raw)
            except (ValueError, RecursionError):
                # JSONDecodeError and UnicodeDecodeError are both ValueError.
                continue
            if not isinstance(entry, dict):
                continue

            entry_type = entry.get("type")
            if entry_type == "user":
                role = Role.USER
                if not conv.cwd:
                    cwd = entry.get("cwd")
                    conv.cwd = cwd if isinstance(cwd, str) else ""
            elif entry_type == "assistant":
                role = Role.ASSISTANT
            else:
                continue

            msg = entry.get("message")
            text = extract_text(msg.get("content")) if isinstance(msg, dict) else ""
            if not text.strip():
                continue

            ts = entry.get("timestamp")
            ts = ts if isinstance(ts, str) else ""
            if not conv.messages:
                conv.first_timestamp = ts
            conv.messages.append(Message(role=role, text=text, timestamp=ts))

    if not conv.messages:
        return None

    conv.last_timestamp = conv.messages[-1].timestamp
    if not conv.cwd:
        conv.cwd = UNKNOWN_CWD
    return conv
