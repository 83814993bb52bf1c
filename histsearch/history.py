"""
history.py - Shell history file parsing

Turns a raw history file into a `HistorySet`: one entry per distinct command,
most recent first.

Formats
-------
- PLAIN (bash): every non-blank line is a command. No timestamps.
- ZSH_EXTENDED: ": <epoch>:<duration>;command". Lines that don't carry the
  prefix continue the command above them (multi-line commands). A line with no
  command above it stands alone as a plain command.
- FISH: lines carrying both a "cmd:" and a later "when:" marker. The scan is
  deliberately shallow; no attempt is made to parse the YAML-ish structure.

Normalization
-------------
Commands are collapsed onto one line. A space followed by one or two
backslashes at a line break (or at the very end) is a continuation artifact
and becomes a single space. The line break itself then becomes one more
space, like any other line break. Every other backslash is left alone.

Ordering
--------
Timestamped entries first, newest first, then untimed entries in file order.
Duplicates are dropped after sorting, so the most recent copy survives.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import overload

from histsearch.errors import HistoryReadError
from histsearch.shell import HistoryFormat

logger = logging.getLogger(__name__)

# ============================================================================
# PATTERNS
# ============================================================================

ZSH_ENTRY_RE = re.compile(r"^: (\d+):\d+;(.*)$", re.DOTALL)
CONTINUATION_RE = re.compile(r" \\{1,2}(?=\n|\Z)")
UNSIGNED_RE = re.compile(r"[0-9]+")

FISH_CMD_MARKER = "cmd:"
FISH_WHEN_MARKER = "when:"

# ============================================================================
# DATA STRUCTURES
# ============================================================================


@dataclass(frozen=True)
class HistoryEntry:
    """A single command from the history file. Compared by `command` only."""

    command: str
    timestamp: int | None = field(default=None, compare=False)
    original_line: str = field(default="", compare=False)


def _sort_key(entry: HistoryEntry) -> tuple[bool, int]:
    if entry.timestamp is None:
        return (True, 0)
    return (False, -entry.timestamp)


class HistorySet(Sequence[HistoryEntry]):
    """
    Ordered, duplicate-free, read-only collection of history entries.

    Whatever is passed in gets sorted (timestamped first, newest first, stable
    otherwise) and deduplicated by command, keeping the first survivor.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[HistoryEntry] = ()):
        seen: set[str] = set()
        unique: list[HistoryEntry] = []
        for entry in sorted(entries, key=_sort_key):
            if entry.command in seen:
                continue
            seen.add(entry.command)
            unique.append(entry)
        self._entries: tuple[HistoryEntry, ...] = tuple(unique)

    @overload
    def __getitem__(self, index: int) -> HistoryEntry: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[HistoryEntry, ...]: ...

    def __getitem__(self, index):
        return self._entries[index]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HistorySet):
            return NotImplemented
        return self._entries == other._entries

    def __hash__(self) -> int:
        return hash(self._entries)

    def __repr__(self) -> str:
        return f"HistorySet({len(self._entries)} entries)"

    @property
    def commands(self) -> list[str]:
        return [entry.command for entry in self._entries]


# ============================================================================
# NORMALIZATION & PER-FORMAT STRATEGIES
# ============================================================================


def normalize_command(text: str) -> str:
    """→ Collapse continuation artifacts and line breaks into single spaces"""
    return CONTINUATION_RE.sub(" ", text).replace("\n", " ")


def parse_plain_line(line: str) -> HistoryEntry | None:
    """→ PLAIN strategy: the whole line is the command"""
    if not line.strip():
        return None
    return HistoryEntry(command=normalize_command(line), original_line=line)


def iter_zsh_blocks(lines: Iterable[str]) -> Iterator[list[str]]:
    """→ Groups zsh lines into entry blocks: a prefixed line plus its continuations"""
    block: list[str] | None = None
    for line in lines:
        if ZSH_ENTRY_RE.match(line):
            if block is not None:
                yield block
            block = [line]
        elif block is not None:
            block.append(line)
        else:
            yield [line]
    if block is not None:
        yield block


def entry_from_zsh_block(block: list[str]) -> HistoryEntry | None:
    """→ ZSH_EXTENDED strategy for a single block; falls back to PLAIN"""
    match = ZSH_ENTRY_RE.match(block[0])
    if match is None:
        return parse_plain_line(block[0])

    raw = "\n".join(block)
    command = normalize_command("\n".join([match.group(2)] + block[1:]))
    if not command.strip():
        logger.debug("Discarding blank zsh entry: %r", raw)
        return None
    return HistoryEntry(command=command, timestamp=int(match.group(1)), original_line=raw)


def iter_zsh_entries(lines: Iterable[str]) -> Iterator[HistoryEntry]:
    for block in iter_zsh_blocks(lines):
        entry = entry_from_zsh_block(block)
        if entry is not None:
            yield entry


def parse_fish_line(line: str) -> HistoryEntry | None:
    """→ FISH strategy: text between "cmd:" and "when:", timestamp after "when:" """
    cmd_start = line.find(FISH_CMD_MARKER)
    if cmd_start < 0:
        return None
    cmd_part = line[cmd_start + len(FISH_CMD_MARKER) :]
    cmd_end = cmd_part.find(FISH_WHEN_MARKER)
    if cmd_end < 0:
        return None

    command = normalize_command(cmd_part[:cmd_end].strip().strip("\"'"))
    if not command.strip():
        return None

    when_part = cmd_part[cmd_end + len(FISH_WHEN_MARKER) :].lstrip(" ")
    when_value = when_part.split(" ", 1)[0]
    timestamp = int(when_value) if UNSIGNED_RE.fullmatch(when_value) else None
    return HistoryEntry(command=command, timestamp=timestamp, original_line=line)


def parse_lines(lines: Iterable[str], fmt: HistoryFormat) -> Iterator[HistoryEntry]:
    """→ Dispatches decoded lines to the strategy for `fmt`"""
    if fmt is HistoryFormat.ZSH_EXTENDED:
        yield from iter_zsh_entries(lines)
    elif fmt is HistoryFormat.FISH:
        for line in lines:
            entry = parse_fish_line(line)
            if entry is not None:
                yield entry
    else:
        for line in lines:
            entry = parse_plain_line(line)
            if entry is not None:
                yield entry


# ============================================================================
# FILE I/O
# ============================================================================


def decode_lines(raw_lines: Iterable[bytes]) -> Iterator[str]:
    """→ UTF-8 decodes each line, skipping (and warning about) undecodable ones"""
    for line_num, raw in enumerate(raw_lines, 1):
        raw = raw.rstrip(b"\n").rstrip(b"\r")
        try:
            yield raw.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.warning("Skipping line %d with invalid UTF-8: %s", line_num, e)


def load_history(path: Path, fmt: HistoryFormat) -> HistorySet:
    """→ File I/O: reads and parses a history file into a HistorySet"""
    try:
        fh = path.open("rb")
    except OSError as e:
        raise HistoryReadError(f"{path}: {e}") from e

    with fh:
        try:
            entries = list(parse_lines(decode_lines(fh), fmt))
        except OSError as e:
            raise HistoryReadError(f"{path}: {e}") from e

    history = HistorySet(entries)
    logger.info(
        "Loaded %d unique entries (%d parsed) from %s as %s",
        len(history),
        len(entries),
        path,
        fmt.value,
    )
    return history
