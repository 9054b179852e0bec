"""Textual picker for searching and resuming Claude Code conversations."""

from __future__ import annotations

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Static

from ccs.models import Conversation, ListItem
from ccs.preview import COMPACT_PREVIEW_CHARS, FULL_PREVIEW_CHARS, body_lines, header_lines, window
from ccs.state import FOOTER_ROWS, HEADER_ROWS, FilterState
from ccs.view import render_columns, render_list, render_search, render_status, render_title


def _text(markup: str) -> Text:
    return Text.from_markup(markup, overflow="ellipsis")


class ConversationList(Static):
    """Middle band: the filtered conversation list."""


class PreviewPane(Static):
    """Bottom band: transcript excerpt for the highlighted conversation."""


class CcsApp(App[Conversation | None]):
    """Main application. Exits with the selected conversation, or None."""

    TITLE = "ccs"
    CSS = """
    Screen {
        layout: vertical;
        overflow: hidden;
    }

    #title, #search, #columns, #status {
        height: 1;
        padding: 0 1;
    }

    #list {
        height: 10;
        padding: 0 1;
    }

    #list.hidden {
        display: none;
    }

    #preview {
        height: 1fr;
        padding: 0 1;
        border-top: solid $accent;
    }

    #status {
        background: $surface;
        color: $text-muted;
    }
    """

    # Priority bindings run before key events are dispatched, so they never
    # reach on_key; printable characters are handled there instead.
    BINDINGS = [
        Binding("ctrl+c", "cancel", "Quit", show=False, priority=True),
        Binding("escape", "escape", "Quit", priority=True),
        Binding("enter", "resume", "Resume", priority=True),
        Binding("up", "cursor(-1)", "Up", show=False, priority=True),
        Binding("down", "cursor(1)", "Down", show=False, priority=True),
        Binding("pageup", "page(-1)", "Page up", show=False, priority=True),
        Binding("pagedown", "page(1)", "Page down", show=False, priority=True),
        Binding("backspace", "backspace", "Delete char", show=False, priority=True),
        Binding("ctrl+u", "clear_query", "Clear", priority=True),
        Binding("ctrl+d", "request_delete", "Delete", priority=True),
        Binding("tab", "toggle_preview", "Preview", priority=True),
    ]

    def __init__(self, items: list[ListItem], query: str = "", state: FilterState | None = None) -> None:
        super().__init__()
        self.state = state or FilterState(items, query)

    def compose(self) -> ComposeResult:
        yield Static(id="title")
        yield Static(id="search")
        yield Static(id="columns")
        yield ConversationList(id="list")
        yield PreviewPane(id="preview")
        yield Static(id="status")

    def on_mount(self) -> None:
        self.state.resize(self.size.width, self.size.height)
        self._refresh_view()

    def on_resize(self, event: events.Resize) -> None:
        self.state.resize(event.size.width, event.size.height)
        self._refresh_view()

    def _refresh_view(self) -> None:
        """Re-render every band from the current state."""
        state = self.state
        list_widget = self.query_one("#list", ConversationList)
        list_widget.styles.height = state.list_rows
        list_widget.set_class(state.full_preview, "hidden")

        self.query_one("#title", Static).update(_text(render_title(state)))
        self.query_one("#search", Static).update(_text(render_search(state)))
        self.query_one("#columns", Static).update(_text(render_columns(state.width)))
        list_widget.update(_text(render_list(state)))
        self.query_one("#preview", PreviewPane).update(_text(self._preview_markup()))
        self.query_one("#status", Static).update(_text(render_status(state)))

    def _preview_markup(self) -> str:
        state = self.state
        item = state.current
        if item is None:
            state.set_preview_lines(0)
            return "[dim]Nothing to preview.[/dim]"
        list_rows = 0 if state.full_preview else state.list_rows
        # Border line above the preview takes one row.
        height = max(1, state.height - HEADER_ROWS - FOOTER_ROWS - list_rows - 1)
        body = body_lines(
            item.conversation,
            state.query,
            max_chars=FULL_PREVIEW_CHARS if state.full_preview else COMPACT_PREVIEW_CHARS,
            width=max(0, state.width - 2),
        )
        state.set_preview_lines(len(body))
        lines = window(header_lines(item.conversation), body, height, state.preview_scroll)
        return "\n".join(lines)

    def _after_event(self) -> None:
        if self.state.done:
            self.exit(self.state.selected)
        else:
            self._refresh_view()

    def on_key(self, event: events.Key) -> None:
        """Printable characters edit the query or answer the delete prompt."""
        if not event.is_printable or not event.character:
            return
        event.stop()
        event.prevent_default()
        if self.state.confirming:
            answer = event.character.lower()
            if answer == "y":
                self.state.confirm_delete()
            elif answer == "n":
                self.state.cancel_delete()
            else:
                return
        else:
            self.state.type_text(event.character)
        self._after_event()

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        if not self.state.confirming:
            self.state.wheel(int(event.screen_y), -1)
            self._after_event()

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        if not self.state.confirming:
            self.state.wheel(int(event.screen_y), 1)
            self._after_event()

    def action_cancel(self) -> None:
        self.state.quit()
        self._after_event()

    def action_escape(self) -> None:
        if self.state.confirming:
            self.state.cancel_delete()
        else:
            self.state.quit()
        self._after_event()

    def action_resume(self) -> None:
        self.state.select()
        self._after_event()

    def action_cursor(self, delta: int) -> None:
        self.state.move_cursor(delta)
        self._after_event()

    def action_page(self, pages: int) -> None:
        self.state.page_preview(pages)
        self._after_event()

    def action_backspace(self) -> None:
        if not self.state.confirming:
            self.state.backspace()
        self._after_event()

    def action_clear_query(self) -> None:
        self.state.clear_query()
        self._after_event()

    def action_request_delete(self) -> None:
        self.state.request_delete()
        self._after_event()

    def action_toggle_preview(self) -> None:
        self.state.toggle_full_preview()
        self._after_event()


def tui_main(items: list[ListItem], query: str = "") -> Conversation | None:
    """Run the picker and return the conversation to resume, if any."""
    app = CcsApp(items, query)
    return app.run()
