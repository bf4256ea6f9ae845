"""
Command history for the interactive shell.

Entries of the current session are kept in memory. When the platform
provides ``readline`` they are also offered for line editing and appended
to a history file that survives restarts.
"""

from __future__ import annotations

import importlib
from pathlib import Path
from types import ModuleType

from fieri.telemetry import get_logger

DEFAULT_HISTORY_FILE = Path.home() / ".fieri_history"

logger = get_logger("fieri.cli")


def _load_readline() -> ModuleType | None:
    try:
        return importlib.import_module("readline")
    except ImportError:
        logger.debug("readline unavailable, history will not persist")
        return None


class History:
    """Session history with optional file persistence.

    Attributes:
        entries: Lines entered during this session, oldest first
    """

    def __init__(self, path: Path | None = DEFAULT_HISTORY_FILE) -> None:
        self.entries: list[str] = []
        self._path = path
        self._readline = _load_readline()
        self._persist = path is not None and self._readline is not None

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def persistent(self) -> bool:
        """Whether new entries are written to the history file."""
        return self._persist

    def load(self) -> None:
        """Load earlier sessions' lines for editing; creates the file if missing."""
        if not self._persist or self._readline is None or self._path is None:
            return
        # Entries are added explicitly in ``add``
        self._readline.set_auto_history(False)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.touch(exist_ok=True)
            self._readline.read_history_file(str(self._path))
        except OSError as e:
            logger.warning("history file unavailable", path=str(self._path), error=str(e))
            self._persist = False

    def add(self, line: str) -> None:
        """Record one entered line."""
        line = line.strip()
        if not line:
            return
        self.entries.append(line)
        if self._readline is None:
            return
        self._readline.add_history(line)
        if self._persist and self._path is not None:
            try:
                self._readline.append_history_file(1, str(self._path))
            except OSError as e:
                logger.warning("cannot write history file", path=str(self._path), error=str(e))
                self._persist = False
