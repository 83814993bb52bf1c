from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from histsearch.errors import ShellDetectionError
from histsearch.shell import HistoryFormat, ShellType

logger = logging.getLogger(__name__)

MAX_DIMENSIONS = 5


@dataclass(frozen=True)
class Config:
    """Everything a search session needs to know before it starts."""

    shell_type: ShellType
    history_file: Path
    output_file: Path | None = None
    debug: bool = False
    max_dimensions: int = MAX_DIMENSIONS

    @property
    def history_format(self) -> HistoryFormat:
        return self.shell_type.history_format

    @classmethod
    def create(
        cls,
        shell: str | None = None,
        history_file: str | Path | None = None,
        output_file: str | Path | None = None,
        debug: bool = False,
    ) -> Config:
        """→ Resolve shell and history path, honouring explicit overrides"""
        if shell is not None:
            shell_type = ShellType.from_name(shell)
            if shell_type is None:
                raise ShellDetectionError(f"Unsupported shell type: {shell}")
        else:
            shell_type = ShellType.detect()

        if history_file is not None:
            history_path = Path(history_file).expanduser()
        else:
            history_path = shell_type.default_history_path()

        config = cls(
            shell_type=shell_type,
            history_file=history_path,
            output_file=Path(output_file).expanduser() if output_file is not None else None,
            debug=debug,
        )
        logger.debug("Configuration loaded: %s", config)
        return config
