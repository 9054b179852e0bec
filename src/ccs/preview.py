"""Preview pane rendering: relevance windowing, highlighting, code framing.

Output lines are Rich console markup. Transcript text is escaped before any
markup is added, so brackets in messages render literally.
"""

from __future__ import annotations

import re
import textwrap

from rich.markup import escape

from ccs.models import Conversation, Message, Role

FULL_PREVIEW_CHARS = 2000
COMPACT_PREVIEW_CHARS = 500

# Messages always shown at each end of a conversation.
EDGE_MESSAGES = 2
# Messages shown on each side of a match.
MATCH_CONTEXT = 1

CODE_FENCE = "```"
INDENT = "    "


def _match_spans(text: str, query: str) -> list[tuple[int, int]]:
    if not query:
        return []
    pattern = re.compile(re.escape(query), re.IGNORECASE)
    return [m.span() for m in pattern.finditer(text)]


def _mark(text: str, spans: list[tuple[int, int]], offset: int = 0) -> str:
    """Escape *text* and reverse the parts covered by *spans*.

    *text* starts at *offset* in the string the spans were computed on, so a
    match split across wrapped lines is marked on both sides.
    """
    out = []
    pos = 0
    for start, end in spans:
        lo = max(start - offset, 0)
        hi = min(end - offset, len(text))
        if lo >= hi:
            continue
        out.append(escape(text[pos:lo]))
        out.append(f"[reverse]{escape(text[lo:hi])}[/reverse]")
        pos = hi
    out.append(escape(text[pos:]))
    return "".join(out)


def highlight(text: str, query: str) -> str:
    """Escape *text* and wrap case-insensitive matches of *query* in reverse markup."""
    return _mark(text, _match_spans(text, query))


def message_matches(msg: Message, query: str) -> bool:
    return bool(query) and query.lower() in msg.text.lower()


def visible_indices(messages: list[Message], query: str) -> list[int]:
    """Indices to display: both ends of the conversation plus matches with context."""
    n = len(messages)
    keep = set(range(min(EDGE_MESSAGES, n)))
    keep.update(range(max(0, n - EDGE_MESSAGES), n))
    if query:
        for i, msg in enumerate(messages):
            if message_matches(msg, query):
                keep.update(range(max(0, i - MATCH_CONTEXT), min(n, i + MATCH_CONTEXT + 1)))
    return sorted(keep)


def _wrap(line: str, width: int) -> list[str]:
    if width <= 0 or len(line) <= width:
        return [line]
    # Parts concatenate back to *line*.
    parts = textwrap.wrap(
        line, width, expand_tabs=False, replace_whitespace=False, drop_whitespace=False,
    )
    return parts or [""]


def format_code_blocks(text: str, query: str, indent: str = INDENT, width: int = 0) -> list[str]:
    """Render message text, framing fenced code and highlighting everything else."""
    lines: list[str] = []
    in_code = False
    inner = max(0, width - len(indent) - 2) if width else 0
    for line in text.split("\n"):
        if line.lstrip().startswith(CODE_FENCE):
            if not in_code:
                in_code = True
                lang = line.lstrip()[len(CODE_FENCE):].strip() or "code"
                lines.append(f"{indent}[bright_black]┌─ {escape(lang)} ─[/bright_black]")
            else:
                in_code = False
                lines.append(f"{indent}[bright_black]└─────────[/bright_black]")
        elif in_code:
            for part in _wrap(line, inner):
                lines.append(f"{indent}[bright_black]│[/bright_black] [cyan]{escape(part)}[/cyan]")
        else:
            spans = _match_spans(line, query)
            offset = 0
            for part in _wrap(line, max(0, width - len(indent)) if width else 0):
                lines.append(f"{indent}{_mark(part, spans, offset)}")
                offset += len(part)
    return lines


def _label(msg: Message, matched: bool) -> str:
    name = "User" if msg.role is Role.USER else "Claude"
    color = "green" if msg.role is Role.USER else "blue"
    if matched:
        return f"[bold {color}]>>> {name}:[/bold {color}]"
    return f"[{color}]{INDENT}{name}:[/{color}]"


def skipped_marker(count: int) -> str:
    noun = "message" if count == 1 else "messages"
    return f"[bright_black]{INDENT}... {count} {noun} skipped ...[/bright_black]"


def header_lines(conv: Conversation) -> list[str]:
    return [
        f"[bold yellow]Project:[/bold yellow] {escape(conv.cwd)}",
        f"[bold yellow]Session:[/bold yellow] {escape(conv.session_id)}",
        f"[bold yellow]Messages:[/bold yellow] {len(conv.messages)}",
        "",
    ]


def body_lines(
    conv: Conversation,
    query: str,
    max_chars: int = FULL_PREVIEW_CHARS,
    width: int = 0,
) -> list[str]:
    """All message lines for *conv*, before scrolling is applied."""
    lines: list[str] = []
    previous = -1
    for i in visible_indices(conv.messages, query):
        gap = i - previous - 1
        if gap > 0:
            lines.append(skipped_marker(gap))
            lines.append("")
        previous = i

        msg = conv.messages[i]
        lines.append(_label(msg, message_matches(msg, query)))
        text = msg.text
        if len(text) > max_chars:
            text = text[:max_chars] + "\n... (truncated)"
        lines.extend(format_code_blocks(text, query, width=width))
        lines.append("")
    return lines


def window(header: list[str], body: list[str], height: int, scroll: int = 0) -> list[str]:
    """Pin *header* and show *body* from *scroll*, clamped to the last body line."""
    scroll = max(0, min(scroll, len(body) - 1)) if body else 0
    room = max(0, height - len(header))
    return header + body[scroll:scroll + room]


def render_preview(
    conv: Conversation,
    query: str,
    height: int,
    scroll: int = 0,
    *,
    max_chars: int = FULL_PREVIEW_CHARS,
    width: int = 0,
) -> list[str]:
    """Header plus the window of message lines at *scroll*, at most *height* lines."""
    body = body_lines(conv, query, max_chars=max_chars, width=width)
    return window(header_lines(conv), body, height, scroll)
