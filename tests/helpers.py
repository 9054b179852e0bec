from __future__ import annotations

import json
import os
from pathlib import Path

from ccs.index import build_items
from ccs.models import Conversation, ListItem, Message, Role


def write_jsonl(path: Path, entries: list[dict | str]) -> Path:
    """Write entries one per line; strings are written verbatim (for corrupt lines)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        for entry in entries:
            line = entry if isinstance(entry, str) else json.dumps(entry)
            f.write(line + "\n")
    return path


def set_mtime(path: Path, seconds: int) -> None:
    ns = seconds * 1_000_000_000
    os.utime(path, ns=(ns, ns))


def user_entry(content, ts: str = "2024-01-15T10:00:00Z", cwd: str | None = "/test/project") -> dict:
    entry = {"type": "user", "message": {"role": "user", "content": content}, "timestamp": ts}
    if cwd is not None:
        entry["cwd"] = cwd
    return entry


def assistant_entry(content, ts: str = "2024-01-15T10:01:00Z") -> dict:
    return {"type": "assistant", "message": {"role": "assistant", "content": content}, "timestamp": ts}


def make_message(**overrides) -> Message:
    data = {
        "role": Role.USER,
        "text": "hello",
        "timestamp": "2024-01-15T10:00:00Z",
    }
    data.update(overrides)
    return Message(**data)


def make_conversation(**overrides) -> Conversation:
    data = {
        "session_id": "session-1",
        "cwd": "/home/user/project",
        "first_timestamp": "2024-01-15T10:00:00Z",
        "last_timestamp": "2024-01-15T10:01:00Z",
        "file_path": "",
        "messages": [
            make_message(text="first message"),
            make_message(role=Role.ASSISTANT, text="response", timestamp="2024-01-15T10:01:00Z"),
        ],
    }
    data.update(overrides)
    return Conversation(**data)


def make_items(*search_texts: str) -> list[ListItem]:
    """Items with hand-written search text, one conversation each."""
    return [
        ListItem(conversation=make_conversation(session_id=f"test-{i}"), search_text=text)
        for i, text in enumerate(search_texts, start=1)
    ]


def make_file_items(root: Path, *session_ids: str) -> list[ListItem]:
    """Items backed by real transcript files under *root*."""
    conversations = []
    for sid in session_ids:
        path = write_jsonl(root / f"{sid}.jsonl", [user_entry(f"message for {sid}")])
        conversations.append(
            make_conversation(
                session_id=sid,
                file_path=str(path),
                messages=[make_message(text=f"message for {sid}")],
            )
        )
    return build_items(conversations)
