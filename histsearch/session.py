"""
session.py - The search session state machine

A session owns the per-dimension filter buffers, the current result view and
the selection cursor. It consumes one key at a time and either mutates that
state or terminates with a `SessionResult`.

Keys use Textual's key names ("ctrl+c", "escape", "up", "down", "enter",
"ctrl+r", "backspace"); anything else with a printable character is typed into
the current dimension.

Invariants after every key:
- `result_view == filter_entries(history, filters.active_prefix)`
- `selected_index` is a valid index whenever `result_view` is non-empty
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from histsearch.config import MAX_DIMENSIONS
from histsearch.filtering import filter_entries
from histsearch.history import HistoryEntry

logger = logging.getLogger(__name__)

KEY_CANCEL = frozenset({"ctrl+c", "escape"})
KEY_UP = "up"
KEY_DOWN = "down"
KEY_SELECT = "enter"
KEY_NEXT_DIMENSION = "ctrl+r"
KEY_BACKSPACE = "backspace"


@dataclass(frozen=True)
class SessionResult:
    """Terminal value of a session. `command` is None when cancelled."""

    command: str | None = None

    @property
    def is_selection(self) -> bool:
        return self.command is not None


NO_SELECTION = SessionResult()


class FilterState:
    """Fixed number of filter buffers plus the index of the one being typed into."""

    def __init__(self, max_dimensions: int = MAX_DIMENSIONS):
        if max_dimensions < 1:
            raise ValueError(f"max_dimensions must be positive, got {max_dimensions}")
        self.max_dimensions = max_dimensions
        self.buffers: list[str] = [""] * max_dimensions
        self.current_dimension = 0

    @property
    def current(self) -> str:
        return self.buffers[self.current_dimension]

    @property
    def active_prefix(self) -> list[str]:
        """→ Buffers 0..current_dimension inclusive; nothing past it is ever read"""
        return self.buffers[: self.current_dimension + 1]

    @property
    def can_advance(self) -> bool:
        return bool(self.current) and self.current_dimension < self.max_dimensions - 1

    def push_char(self, char: str) -> None:
        self.buffers[self.current_dimension] += char

    def pop_char(self) -> bool:
        """→ Drops the last character of the current buffer; False if it was empty"""
        if not self.current:
            return False
        self.buffers[self.current_dimension] = self.current[:-1]
        return True

    def advance(self) -> bool:
        if not self.can_advance:
            return False
        self.current_dimension += 1
        return True

    def retreat(self) -> bool:
        """→ Steps back one dimension, only from an empty buffer"""
        if self.current or self.current_dimension == 0:
            return False
        self.current_dimension -= 1
        return True


class SearchSession:
    def __init__(self, history: Sequence[HistoryEntry], max_dimensions: int = MAX_DIMENSIONS):
        self.history = history
        self.filters = FilterState(max_dimensions)
        self.result_view: list[HistoryEntry] = []
        self.selected_index = 0
        self.outcome: SessionResult | None = None
        self.update_filters()

    # --- Read-only views ---

    @property
    def terminated(self) -> bool:
        return self.outcome is not None

    @property
    def current_dimension(self) -> int:
        return self.filters.current_dimension

    @property
    def max_dimensions(self) -> int:
        return self.filters.max_dimensions

    @property
    def can_add_dimension(self) -> bool:
        return self.filters.can_advance

    @property
    def selected_entry(self) -> HistoryEntry | None:
        if not self.result_view:
            return None
        return self.result_view[self.selected_index]

    @property
    def selected_command(self) -> str | None:
        """→ The chosen command once the session ended with a selection"""
        if self.outcome is None:
            return None
        return self.outcome.command

    def filter(self, dimension: int) -> str:
        return self.filters.buffers[dimension]

    # --- Transitions ---

    def update_filters(self) -> None:
        """→ Recomputes the result view from the active prefix and clamps the cursor"""
        self.result_view = filter_entries(self.history, self.filters.active_prefix)
        if self.result_view and self.selected_index >= len(self.result_view):
            self.selected_index = len(self.result_view) - 1

    def terminate(self, outcome: SessionResult) -> None:
        self.outcome = outcome
        logger.debug("Session terminated: %s", outcome)

    def handle_key(self, key: str, character: str | None = None) -> None:
        """→ Applies one input event. Keys after termination are ignored."""
        if self.terminated:
            return

        if key in KEY_CANCEL:
            self.terminate(NO_SELECTION)
        elif key == KEY_UP:
            if self.result_view:
                self.selected_index = max(self.selected_index - 1, 0)
        elif key == KEY_DOWN:
            if self.result_view:
                self.selected_index = min(self.selected_index + 1, len(self.result_view) - 1)
        elif key == KEY_SELECT:
            if self.result_view:
                self.terminate(SessionResult(self.result_view[self.selected_index].command))
        elif key == KEY_NEXT_DIMENSION:
            if self.filters.advance():
                logger.debug("Advanced to dimension %d", self.current_dimension)
        elif key == KEY_BACKSPACE:
            if self.filters.pop_char():
                self.update_filters()
            elif self.filters.retreat():
                # Dropping an empty trailing filter leaves the result view unchanged.
                logger.debug("Retreated to dimension %d", self.current_dimension)
        elif character and character.isprintable():
            self.filters.push_char(character)
            self.update_filters()
