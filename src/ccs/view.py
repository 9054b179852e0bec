"""Pure renderers for the title, search line, list band and status line.

Each function reads FilterState and returns Rich markup; none of them
mutate it.
"""

from __future__ import annotations

from rich.markup import escape

from ccs.index import count_hits, format_timestamp, pad_right, truncate
from ccs.models import ListItem, get_topic, project_name
from ccs.state import FilterState

DATE_WIDTH = 16
PROJECT_WIDTH = 20
COUNT_WIDTH = 5
HITS_WIDTH = 5
MIN_TOPIC_WIDTH = 10

KEY_HINTS = "↑↓ move · enter resume · tab preview · pgup/pgdn scroll · ctrl+d delete · ctrl+u clear · esc quit"


def render_title(state: FilterState) -> str:
    return (
        f"[bold magenta]ccs[/bold magenta] [dim]Claude Code Search[/dim]  "
        f"[dim]{len(state.filtered)}/{len(state.items)}[/dim]"
    )


def render_search(state: FilterState) -> str:
    if not state.query:
        return "[bold]Search:[/bold] [dim]type to search…[/dim]"
    return f"[bold]Search:[/bold] {escape(state.query)}[reverse] [/reverse]"


def render_columns(width: int) -> str:
    topic_width = max(MIN_TOPIC_WIDTH, width - DATE_WIDTH - PROJECT_WIDTH - COUNT_WIDTH - HITS_WIDTH - 6)
    row = "  ".join([
        pad_right("DATE", DATE_WIDTH),
        pad_right("PROJECT", PROJECT_WIDTH),
        pad_right("MSGS", COUNT_WIDTH),
        pad_right("HITS", HITS_WIDTH),
    ])
    return f"[bold dim]  {row}  {pad_right('TOPIC', topic_width).rstrip()}[/bold dim]"


def format_list_item(item: ListItem, selected: bool, query: str, width: int = 100) -> str:
    """One list row: date, project, message count, hits and topic."""
    conv = item.conversation
    topic_width = max(MIN_TOPIC_WIDTH, width - DATE_WIDTH - PROJECT_WIDTH - COUNT_WIDTH - HITS_WIDTH - 10)

    date = pad_right(format_timestamp(conv.last_timestamp), DATE_WIDTH)
    project = pad_right(truncate(project_name(conv.cwd), PROJECT_WIDTH), PROJECT_WIDTH)
    count = pad_right(str(len(conv.messages)), COUNT_WIDTH)
    hits = count_hits(conv, query)
    hits_col = pad_right(str(hits) if hits else "", HITS_WIDTH)
    topic = truncate(get_topic(conv), topic_width)

    if selected:
        line = f"> {date}  {project}  {count}  {hits_col}  {topic}"
        return f"[reverse bold]{escape(line)}[/reverse bold]"
    return (
        f"  [cyan]{escape(date)}[/cyan]  [green]{escape(project)}[/green]  "
        f"[dim]{count}[/dim]  [yellow]{hits_col}[/yellow]  {escape(topic)}"
    )


def list_window(state: FilterState) -> tuple[int, int]:
    """Slice bounds of ``state.filtered`` that keep the cursor visible."""
    rows = state.list_rows
    start = max(0, state.cursor - rows + 1)
    return start, min(len(state.filtered), start + rows)


def render_list(state: FilterState) -> str:
    if not state.filtered:
        if state.query:
            return f"  [dim]No conversations match '{escape(state.query)}'[/dim]"
        return "  [dim]No conversations[/dim]"
    start, end = list_window(state)
    return "\n".join(
        format_list_item(state.filtered[i], i == state.cursor, state.query, state.width)
        for i in range(start, end)
    )


def render_status(state: FilterState) -> str:
    target = state.pending_delete
    if state.confirming and target is not None:
        topic = escape(truncate(get_topic(target.conversation), 50))
        return f"[bold red]Delete conversation[/bold red] '{topic}'? [bold]\\[y/N][/bold]"
    if state.error:
        return f"[red]{escape(state.error)}[/red]"
    return f"[dim]{KEY_HINTS}[/dim]"
