"""One-shot conversation cache written before the picker starts."""

from __future__ import annotations

import json

from ccs.models import Conversation, Message, Role
from ccs.paths import CACHE_DIR

CACHE_FILE = CACHE_DIR / "conversations.json"


def _conversation_to_dict(c: Conversation) -> dict:
    return {
        "session_id": c.session_id,
        "cwd": c.cwd,
        "first_timestamp": c.first_timestamp,
        "last_timestamp": c.last_timestamp,
        "file_path": c.file_path,
        "messages": [
            {"role": m.role.value, "text": m.text, "ts": m.timestamp}
            for m in c.messages
        ],
    }


def _dict_to_conversation(d: dict) -> Conversation:
    return Conversation(
        session_id=d["session_id"],
        cwd=d.get("cwd") or "unknown",
        first_timestamp=d.get("first_timestamp", ""),
        last_timestamp=d.get("last_timestamp", ""),
        file_path=d.get("file_path", ""),
        messages=[
            Message(role=Role(m["role"]), text=m["text"], timestamp=m.get("ts", ""))
            for m in d.get("messages", [])
        ],
    )


def save_cache(conversations: list[Conversation]) -> None:
    """Write all conversations keyed by session id. Raises OSError on failure."""
    data = {"conversations": {c.session_id: _conversation_to_dict(c) for c in conversations}}
    CACHE_DIR.mkdir(parents=True, exist_ok=True)
    with open(CACHE_FILE, "w") as f:
        json.dump(data, f)


def load_cache() -> dict[str, Conversation] | None:
    """Load the cache. Returns None if missing or corrupt."""
    if not CACHE_FILE.is_file():
        return None
    try:
        with open(CACHE_FILE) as f:
            data = json.load(f)
        return {
            sid: _dict_to_conversation(d)
            for sid, d in data["conversations"].items()
        }
    except (json.JSONDecodeError, OSError, KeyError, TypeError, ValueError, AttributeError):
        return None
