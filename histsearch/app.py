"""
app.py - Textual front end for a search session

The app is a thin shell around `SearchSession`: it forwards keys, then redraws
everything from the session's state. It never filters or moves the cursor on
its own, so whatever the session says is what gets drawn.

Layout, top to bottom:
  - One panel per filter dimension. Dimensions past the current one stay
    hidden until they are reached or hold text.
  - The results panel, titled with the match count, scrolled so the selected
    row is always visible.
  - A one-line status hint.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from rich.markup import escape
from rich.table import Table
from rich.text import Text as RichText
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Static

from histsearch.config import MAX_DIMENSIONS
from histsearch.highlight import highlight_command
from histsearch.history import HistoryEntry
from histsearch.session import SearchSession

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"
SELECTED_MARKER = "›"
CURSOR = "▏"


def ordinal(n: int) -> str:
    """→ 1 → "1st", 2 → "2nd", 11 → "11th" """
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def format_timestamp(timestamp: int | None) -> str:
    if timestamp is None:
        return ""
    try:
        return datetime.fromtimestamp(timestamp).strftime(TIMESTAMP_FORMAT)
    except (OverflowError, OSError, ValueError):
        return ""


def status_text(session: SearchSession) -> str:
    hints = "Up/Down to navigate | Enter to select | Esc to cancel"
    if session.can_add_dimension:
        next_dim = ordinal(session.current_dimension + 2)
        return f"Press Ctrl+R to add a {next_dim} dimension filter | {hints}"
    return hints


def results_table(
    entries: Sequence[HistoryEntry], window: range, selected: int, filters: Sequence[str]
) -> Table:
    """→ One grid row per entry in `window`; the timestamp column only when any row has one"""
    with_time = any(entries[i].timestamp is not None for i in window)

    table = Table.grid(expand=True, padding=(0, 1))
    table.add_column(width=1)
    if with_time:
        table.add_column(style="#5C6370", no_wrap=True)
    table.add_column(ratio=1, no_wrap=True, overflow="ellipsis")

    for i in window:
        entry = entries[i]
        is_selected = i == selected
        row: list[RichText | str] = [SELECTED_MARKER if is_selected else " "]
        if with_time:
            row.append(format_timestamp(entry.timestamp))
        row.append(highlight_command(entry.command, filters))
        table.add_row(*row, style="bold on #2d2a2e" if is_selected else None)
    return table


class FilterPanel(Static):
    """Shows the text of one filter dimension."""

    DEFAULT_CSS = """
    FilterPanel {
        height: 3;
        border: round #4B5263;
        padding: 0 1;
        color: #5C6370;
    }
    FilterPanel.filled {
        color: $text;
    }
    FilterPanel.active {
        border: round #FF4500;
        color: $text;
    }
    """

    def __init__(self, dimension: int, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.dimension = dimension

    def show(self, text: str, active: bool) -> None:
        title = f"Filter ({ordinal(self.dimension + 1)} dimension)"
        self.border_title = f"{title} {escape('[active]')}" if active else title
        self.set_class(active, "active")
        self.set_class(bool(text), "filled")
        content = RichText(text)
        if active:
            content.append(CURSOR, style="bold")
        self.update(content)


class ResultsPanel(Static):
    DEFAULT_CSS = """
    ResultsPanel {
        height: 1fr;
        border: round $primary;
        padding: 0 1;
    }
    """

    offset_row = 0

    @property
    def visible_rows(self) -> int:
        return max(self.content_size.height, 1)

    def scroll_window(self, selected: int, total: int) -> range:
        """→ Keeps `selected` inside the visible window, moving it as little as possible"""
        rows = self.visible_rows
        if selected < self.offset_row:
            self.offset_row = selected
        elif selected >= self.offset_row + rows:
            self.offset_row = selected - rows + 1
        self.offset_row = max(0, min(self.offset_row, total - rows))
        return range(self.offset_row, min(self.offset_row + rows, total))

    def show(self, entries: Sequence[HistoryEntry], selected: int, filters: Sequence[str]) -> None:
        self.border_title = f"{len(entries)} results"
        window = self.scroll_window(selected, len(entries))
        self.update(results_table(entries, window, selected, filters))


class HistorySearchApp(App[str | None]):
    """Returns the selected command, or None when the search was cancelled."""

    TITLE = "histsearch"
    ENABLE_COMMAND_PALETTE = False

    CSS = """
    #filters {
        height: auto;
    }
    #status {
        height: 1;
        color: #5C6370;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("ctrl+c", "session_key('ctrl+c')", "Cancel", show=False, priority=True),
        Binding("escape", "session_key('escape')", "Cancel", priority=True),
        Binding("up", "session_key('up')", "Previous", show=False, priority=True),
        Binding("down", "session_key('down')", "Next", show=False, priority=True),
        Binding("enter", "session_key('enter')", "Select", priority=True),
        Binding("ctrl+r", "session_key('ctrl+r')", "Add dimension", priority=True),
        Binding("backspace", "session_key('backspace')", "Delete", show=False, priority=True),
    ]

    def __init__(self, session: SearchSession, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.session = session
        self.filter_panels: list[FilterPanel] = []
        self.results_panel: ResultsPanel | None = None
        self.status_line: Static | None = None

    def compose(self) -> ComposeResult:
        with Vertical(id="filters"):
            for dim in range(self.session.max_dimensions):
                panel = FilterPanel(dim, id=f"filter-{dim}")
                self.filter_panels.append(panel)
                yield panel
        self.results_panel = ResultsPanel(id="results")
        yield self.results_panel
        self.status_line = Static(id="status")
        yield self.status_line

    def on_mount(self) -> None:
        self.refresh_view()

    def on_resize(self, event: events.Resize) -> None:
        self.refresh_view()

    def on_key(self, event: events.Key) -> None:
        if event.is_printable and event.character:
            event.stop()
            self.forward_key(event.key, event.character)

    def action_session_key(self, key: str) -> None:
        self.forward_key(key)

    def forward_key(self, key: str, character: str | None = None) -> None:
        self.session.handle_key(key, character)
        if self.session.terminated:
            self.exit(self.session.selected_command)
        else:
            self.refresh_view()

    def refresh_view(self) -> None:
        """→ Redraws every panel from the session state"""
        if self.results_panel is None or self.status_line is None:
            return
        session = self.session
        for panel in self.filter_panels:
            text = session.filter(panel.dimension)
            panel.display = panel.dimension <= session.current_dimension or bool(text)
            panel.show(text, active=panel.dimension == session.current_dimension)

        self.results_panel.show(
            session.result_view,
            session.selected_index,
            session.filters.active_prefix,
        )
        self.status_line.update(RichText(status_text(session)))


def run_search(history: Sequence[HistoryEntry], max_dimensions: int = MAX_DIMENSIONS) -> str | None:
    """→ Runs the interactive search and returns the chosen command, if any"""
    session = SearchSession(history, max_dimensions=max_dimensions)
    logger.debug("Starting search over %d entries", len(history))
    return HistorySearchApp(session).run()
