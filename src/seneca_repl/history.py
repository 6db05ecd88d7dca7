"""Command history persistence.

Storage location: ~/.seneca/repl-<encoded address>.history
One line per command, oldest first, shared with other Seneca REPL clients
connecting to the same address.

History is best-effort: every read or write failure is logged at debug
level and otherwise ignored. It never stops the console.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from .destination import Destination

logger = logging.getLogger(__name__)

_LINE_BREAKS = re.compile(r"[\r\n]+")


class HistoryStore:
    """
    Reads and appends the history file for one destination.

    Contract:
    - Inputs: submitted lines (str)
    - Outputs: previously submitted lines, most-recent-first
    - Side Effects: Appends to the history file
    - Errors: None raised; filesystem failures are swallowed
    """

    def __init__(self, path: Path | None):
        """Initialize with the history file path; None disables history."""
        self.path = path

    @classmethod
    def for_destination(cls, destination: Destination, directory: Path) -> HistoryStore:
        """History file for a destination inside ``directory``."""
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.debug(f"Cannot create history directory {directory}: {e}")
        return cls(directory / f"repl-{destination.history_key}.history")

    @classmethod
    def disabled(cls) -> HistoryStore:
        return cls(None)

    def load(self) -> list[str]:
        """Return saved lines, most-recent-first, without blank lines."""
        if self.path is None:
            return []
        try:
            content = self.path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.debug(f"Cannot read history {self.path}: {e}")
            return []

        lines = [line for line in _LINE_BREAKS.split(content) if line]
        lines.reverse()
        return lines

    def append(self, line: str) -> None:
        """Append one line."""
        if self.path is None:
            return
        try:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            logger.debug(f"Cannot write history {self.path}: {e}")
