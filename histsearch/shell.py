"""
shell.py - Shell detection and per-shell history locations

Resolves which shell's history we are searching, which on-disk format that
history uses, and where the file lives by default.

Detection order when no shell is named explicitly:
  1. `$SHELL`, matched on its trailing path component (`/usr/bin/zsh` → zsh).
  2. The parent process's command name (`ps -p <ppid> -o comm=`), matched by
     substring so login shells like `-zsh` resolve too.
  3. bash.
Detection never fails; only an explicit, unknown shell name does.
"""

from __future__ import annotations

import logging
import os
import subprocess
from enum import Enum
from pathlib import Path

from histsearch.errors import OtherError

logger = logging.getLogger(__name__)

PARENT_PROBE_TIMEOUT = 2.0


class HistoryFormat(Enum):
    """On-disk history encodings; one parsing strategy per member."""

    PLAIN = "plain"
    ZSH_EXTENDED = "zsh_extended"
    FISH = "fish"


class ShellType(Enum):
    BASH = "bash"
    ZSH = "zsh"
    FISH = "fish"

    @classmethod
    def from_name(cls, name: str) -> ShellType | None:
        """→ Case-insensitive substring match against known shell names"""
        name = name.strip().lower()
        for shell in cls:
            if shell.value in name:
                return shell
        return None

    @classmethod
    def from_path(cls, path: str) -> ShellType | None:
        """→ Match the trailing component of a shell path, e.g. `$SHELL`"""
        component = Path(path.strip()).name.lower()
        if not component:
            return None
        for shell in cls:
            if component.endswith(shell.value):
                return shell
        return None

    @classmethod
    def detect(cls) -> ShellType:
        """→ Best-effort detection of the invoking shell; defaults to bash"""
        env_shell = os.environ.get("SHELL")
        if env_shell:
            shell = cls.from_path(env_shell)
            if shell is not None:
                logger.debug("Detected %s from $SHELL=%s", shell.value, env_shell)
                return shell
            logger.debug("Could not determine shell from $SHELL=%s", env_shell)

        parent_name = _parent_process_name()
        if parent_name:
            shell = cls.from_name(parent_name)
            if shell is not None:
                logger.debug("Detected %s from parent process %r", shell.value, parent_name)
                return shell
            logger.debug("Parent process %r is not a known shell", parent_name)

        logger.debug("Falling back to bash")
        return cls.BASH

    @property
    def history_format(self) -> HistoryFormat:
        return _HISTORY_FORMATS[self]

    def default_history_path(self, home: Path | None = None) -> Path:
        """→ Default history file for this shell under the user's home directory"""
        if home is None:
            try:
                home = Path.home()
            except (RuntimeError, KeyError) as e:
                raise OtherError(f"Could not determine home directory: {e}") from e
        return home / _HISTORY_FILES[self]


_HISTORY_FORMATS = {
    ShellType.BASH: HistoryFormat.PLAIN,
    ShellType.ZSH: HistoryFormat.ZSH_EXTENDED,
    ShellType.FISH: HistoryFormat.FISH,
}

_HISTORY_FILES = {
    ShellType.BASH: Path(".bash_history"),
    ShellType.ZSH: Path(".zsh_history"),
    ShellType.FISH: Path(".local/share/fish/fish_history"),
}


def _parent_process_name() -> str | None:
    """→ Command name of the parent process, or None if it can't be read"""
    try:
        result = subprocess.run(
            ["ps", "-p", str(os.getppid()), "-o", "comm="],
            capture_output=True,
            text=True,
            timeout=PARENT_PROBE_TIMEOUT,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("Parent process lookup failed: %s", e)
        return None
    if result.returncode != 0:
        logger.debug("Parent process lookup exited with %d", result.returncode)
        return None
    return result.stdout.strip() or None
