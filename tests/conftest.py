"""Pytest fixtures for histsearch tests."""

import logging
from pathlib import Path

import pytest

from histsearch.console import LOGGER_NAME
from histsearch.history import HistoryEntry, HistorySet


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo setup_logging() so caplog sees records in every test."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def write_history(tmp_path):
    """Write raw lines (str or bytes) to a history file and return its path."""

    def _write(lines, name="history"):
        path = tmp_path / name
        data = b"".join(
            (line if isinstance(line, bytes) else line.encode("utf-8")) + b"\n" for line in lines
        )
        path.write_bytes(data)
        return path

    return _write


@pytest.fixture
def sample_history():
    return HistorySet(
        [
            HistoryEntry("ls -la", original_line="ls -la"),
            HistoryEntry("cd /tmp", original_line="cd /tmp"),
            HistoryEntry("ls -l /tmp", original_line="ls -l /tmp"),
        ]
    )


@pytest.fixture
def home(tmp_path, monkeypatch) -> Path:
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path
