"""Searchable list items built from parsed conversations."""

from __future__ import annotations

from datetime import datetime

from ccs.models import Conversation, ListItem, Role


def collapse_whitespace(text: str) -> str:
    return " ".join(text.split())


def truncate(text: str, max_len: int) -> str:
    """Collapse whitespace and cut to *max_len* characters with an ellipsis."""
    text = collapse_whitespace(text)
    if len(text) <= max_len:
        return text
    if max_len <= 3:
        return text[:max_len]
    return text[: max_len - 3] + "..."


def pad_right(text: str, length: int) -> str:
    """Pad with spaces to exactly *length* characters, cutting if longer."""
    if len(text) >= length:
        return text[:length]
    return text + " " * (length - len(text))


def format_timestamp(ts: str) -> str:
    """Render an ISO-8601 timestamp as local ``YYYY-MM-DD HH:MM``.

    Unparseable values fall back to their first 16 characters.
    """
    if not ts:
        return ""
    try:
        parsed = datetime.fromisoformat(ts.replace("Z", "+00:00"))
    except ValueError:
        return ts[:16]
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.strftime("%Y-%m-%d %H:%M")


def build_search_text(conv: Conversation) -> str:
    parts = [
        conv.session_id,
        conv.cwd,
        format_timestamp(conv.first_timestamp),
        format_timestamp(conv.last_timestamp),
    ]
    parts.extend(m.text for m in conv.messages if m.role is Role.USER)
    return collapse_whitespace(" ".join(parts))


def build_items(conversations: list[Conversation]) -> list[ListItem]:
    """One ListItem per conversation, in input order."""
    return [ListItem(conversation=c, search_text=build_search_text(c)) for c in conversations]


def filter_items(items: list[ListItem], query: str) -> list[ListItem]:
    """Case-insensitive substring filter over ``search_text``, order preserved."""
    if not query:
        return list(items)
    needle = query.lower()
    return [item for item in items if needle in item.search_text.lower()]


def count_hits(conv: Conversation, query: str) -> int:
    """Number of user messages containing *query* (case-insensitive)."""
    if not query:
        return 0
    needle = query.lower()
    return sum(1 for m in conv.messages if m.role is Role.USER and needle in m.text.lower())
