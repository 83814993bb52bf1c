"""
filtering.py - N-dimensional filtering over a HistorySet

Each dimension is a case-insensitive substring filter. Dimensions are applied
in order, each one narrowing what the previous one kept, so the result for
dimensions [0..k+1] is always a subset of the result for [0..k]. Order of the
underlying HistorySet is preserved.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from histsearch.errors import OtherError
from histsearch.history import HistoryEntry

logger = logging.getLogger(__name__)


def compile_filter(text: str, regex: bool = False) -> re.Pattern[str]:
    """→ Case-insensitive pattern for one dimension; literal unless `regex`"""
    source = text if regex else re.escape(text)
    try:
        return re.compile(source, re.IGNORECASE)
    except re.error as e:
        raise OtherError(f"Invalid regex {text!r}: {e}") from e


def filter_entries(
    history: Sequence[HistoryEntry],
    filters: Sequence[str],
    regex: bool = False,
) -> list[HistoryEntry]:
    """
    Returns the entries whose command matches every non-empty filter.

    An empty filter list, or an empty first filter, means "nothing typed yet"
    and returns everything. Empty filters further in are skipped.
    """
    if not filters or not filters[0]:
        return list(history)

    filtered = list(history)
    for text in filters:
        if not text:
            continue
        pattern = compile_filter(text, regex=regex)
        filtered = [entry for entry in filtered if pattern.search(entry.command)]

    logger.debug("Filters %r matched %d of %d entries", list(filters), len(filtered), len(history))
    return filtered
