"""Data models for ccs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

UNKNOWN_CWD = "unknown"


class Role(Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    role: Role
    text: str
    timestamp: str = ""  # ISO-8601, empty for legacy entries


@dataclass
class Conversation:
    session_id: str
    cwd: str = UNKNOWN_CWD
    first_timestamp: str = ""
    last_timestamp: str = ""
    file_path: str = ""  # Needed for deletion
    messages: list[Message] = field(default_factory=list)

    def user_messages(self) -> list[Message]:
        return [m for m in self.messages if m.role is Role.USER]


@dataclass(frozen=True)
class ListItem:
    """One searchable row: a conversation plus its flattened search string."""

    conversation: Conversation
    search_text: str


def get_topic(conv: Conversation) -> str:
    """Return the first user message, or the session id if there is none."""
    for m in conv.messages:
        if m.role is Role.USER:
            return " ".join(m.text.split())
    return conv.session_id


def project_name(cwd: str) -> str:
    """Short display name for a working directory (its last path component)."""
    if not cwd:
        return ""
    stripped = cwd.rstrip("/")
    if not stripped:
        return cwd
    return stripped.rsplit("/", 1)[-1]
