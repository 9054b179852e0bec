"""Interactive filter/selection state machine.

``FilterState`` owns the query, the filtered view, the cursor, the preview
scroll offset and the delete confirmation. Every input event maps to one
method here; the Textual app only translates terminal events and re-renders.
Nothing in this module touches the terminal.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from enum import Enum

from ccs.index import filter_items
from ccs.models import Conversation, ListItem

# Rows above the list band: title, search line, column header.
HEADER_ROWS = 3
# Status line below the preview band.
FOOTER_ROWS = 1
MIN_LIST_ROWS = 3
LIST_FRACTION = 0.4

WHEEL_STEP = 3
PAGE_STEP = 10


class Mode(Enum):
    BROWSING = "browsing"
    CONFIRMING_DELETE = "confirming_delete"


class Region(Enum):
    HEADER = "header"
    LIST = "list"
    PREVIEW = "preview"


class Outcome(Enum):
    RESUME = "resume"
    CANCEL = "cancel"


def list_rows_for(height: int) -> int:
    """List band height for a terminal *height*, never below MIN_LIST_ROWS."""
    body = height - HEADER_ROWS - FOOTER_ROWS
    return max(MIN_LIST_ROWS, int(body * LIST_FRACTION))


class FilterState:
    """Mutable session state for the interactive picker."""

    def __init__(
        self,
        items: list[ListItem],
        query: str = "",
        *,
        remove_file: Callable[[str], None] = os.remove,
        width: int = 80,
        height: int = 24,
    ) -> None:
        self.items: list[ListItem] = list(items)
        self.query = query
        self.filtered: list[ListItem] = filter_items(self.items, query)
        self.cursor = 0
        self.preview_scroll = 0
        # Body length of the last rendered preview; None until the first render.
        self.preview_lines: int | None = None
        self.mode = Mode.BROWSING
        self.delete_index: int | None = None
        self.error: str | None = None
        self.full_preview = False
        self.outcome: Outcome | None = None
        self.selected: Conversation | None = None
        self._remove_file = remove_file
        self.width = width
        self.height = height
        self.list_rows = list_rows_for(height)

    # -- derived -------------------------------------------------------------

    @property
    def done(self) -> bool:
        return self.outcome is not None

    @property
    def confirming(self) -> bool:
        return self.mode is Mode.CONFIRMING_DELETE

    @property
    def current(self) -> ListItem | None:
        if not self.filtered:
            return None
        return self.filtered[self.cursor]

    @property
    def pending_delete(self) -> ListItem | None:
        if self.delete_index is None or not 0 <= self.delete_index < len(self.filtered):
            return None
        return self.filtered[self.delete_index]

    def region_at(self, row: int) -> Region:
        """Classify a screen row into the header, list or preview band."""
        if row < HEADER_ROWS:
            return Region.HEADER
        if not self.full_preview and row < HEADER_ROWS + self.list_rows:
            return Region.LIST
        return Region.PREVIEW

    def _clamp_scroll(self) -> None:
        if self.preview_lines is not None:
            self.preview_scroll = min(self.preview_scroll, self.preview_lines - 1)
        self.preview_scroll = max(0, self.preview_scroll)

    def _clamp_cursor(self) -> None:
        if not self.filtered:
            self.cursor = 0
        else:
            self.cursor = max(0, min(self.cursor, len(self.filtered) - 1))

    # -- query ---------------------------------------------------------------

    def set_query(self, query: str) -> None:
        if self.confirming:
            return
        self.query = query
        self.filtered = filter_items(self.items, query)
        self._clamp_cursor()
        self.preview_scroll = 0

    def type_text(self, text: str) -> None:
        self.set_query(self.query + text)

    def backspace(self) -> None:
        if self.query:
            self.set_query(self.query[:-1])

    def clear_query(self) -> None:
        self.set_query("")

    # -- navigation ----------------------------------------------------------

    def move_cursor(self, delta: int) -> None:
        if self.confirming or not self.filtered:
            return
        previous = self.cursor
        self.cursor += delta
        self._clamp_cursor()
        if self.cursor != previous:
            self.preview_scroll = 0

    def scroll_preview(self, delta: int) -> None:
        if self.confirming:
            return
        self.preview_scroll += delta
        self._clamp_scroll()

    def set_preview_lines(self, count: int) -> None:
        """Record how many body lines the preview has, re-clamping the scroll."""
        self.preview_lines = count
        self._clamp_scroll()

    def page_preview(self, pages: int) -> None:
        self.scroll_preview(pages * PAGE_STEP)

    def wheel(self, row: int, delta: int) -> None:
        """Wheel notch at screen *row*; negative *delta* is up."""
        region = self.region_at(row)
        if region is Region.LIST:
            self.move_cursor(delta)
        elif region is Region.PREVIEW:
            self.scroll_preview(delta * WHEEL_STEP)

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.list_rows = list_rows_for(height)

    def toggle_full_preview(self) -> None:
        if self.confirming:
            return
        self.full_preview = not self.full_preview
        self.preview_scroll = 0

    # -- terminal outcomes ---------------------------------------------------

    def select(self) -> None:
        if self.confirming or not self.filtered:
            return
        self.selected = self.filtered[self.cursor].conversation
        self.outcome = Outcome.RESUME

    def quit(self) -> None:
        self.selected = None
        self.outcome = Outcome.CANCEL

    # -- deletion ------------------------------------------------------------

    def request_delete(self) -> None:
        if self.confirming or not self.filtered:
            return
        self.delete_index = self.cursor
        self.mode = Mode.CONFIRMING_DELETE

    def cancel_delete(self) -> None:
        self.delete_index = None
        self.mode = Mode.BROWSING

    def confirm_delete(self) -> None:
        """Remove the pending conversation's file, then drop it from the view."""
        target = self.pending_delete
        self.cancel_delete()
        if target is None:
            return

        try:
            self._remove_file(target.conversation.file_path)
        except OSError as exc:
            self.error = f"Error deleting conversation: {exc}"
            return

        self.items = [item for item in self.items if item is not target]
        self.filtered = [item for item in self.filtered if item is not target]
        self._clamp_cursor()
        self.preview_scroll = 0
        self.error = None
