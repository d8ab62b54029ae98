"""
Line-based processing log.

A DebugLog is handed to the extraction core as its log sink. It keeps
timestamped lines for display to the user and mirrors each message to the
stdlib logger.
"""

import logging
from datetime import datetime
from typing import List, Optional

logger = logging.getLogger(__name__)


class DebugLog:
    """Collects ``[HH:MM:SS] message`` lines."""

    def __init__(self, logger_: Optional[logging.Logger] = None):
        self.lines: List[str] = []
        self._logger = logger_ or logger

    def __call__(self, message: str) -> None:
        timestamp = datetime.now().strftime("%H:%M:%S")
        self.lines.append(f"[{timestamp}] {message}")
        self._logger.debug(message)

    def __len__(self) -> int:
        return len(self.lines)

    def clear(self) -> None:
        self.lines = []
