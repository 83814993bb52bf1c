"""
Errors raised by histsearch.

Every fatal condition is a `HistSearchError`. Per-line problems in a history
file are never raised; the parser logs and skips them.
"""

from __future__ import annotations


class HistSearchError(Exception):
    """Base class; renders as "<prefix>: <detail>"."""

    prefix = "Error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.prefix}: {self.detail}"


class ShellDetectionError(HistSearchError):
    """Unresolvable or unsupported shell name."""

    prefix = "Failed to detect shell"


class HistoryReadError(HistSearchError):
    """The history file could not be opened or read."""

    prefix = "Failed to read history file"


class HistoryParseError(HistSearchError):
    prefix = "Failed to parse history"


class HistSearchIOError(HistSearchError):
    """Low-level I/O fault outside the history file, e.g. the output sink."""

    prefix = "IO error"


class OtherError(HistSearchError):
    """Home directory lookup failures, pattern compilation failures."""

    prefix = "Other error"
