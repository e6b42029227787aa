"""
Status line and debug history
"""
from typing import List, Optional

from ...core.constants import DEBUG_HISTORY
from ...core.logging import get_logger

logger = get_logger("ssm.session")


class StatusLog:
    """
    Transient messages shown under the host list.

    Holds one error line, replaced or cleared as the user acts, and in
    debug mode the most recent numbered debug lines. Every debug line is
    also sent to Python logging whether or not it is displayed.
    """

    def __init__(self, debug: bool = False, history: int = DEBUG_HISTORY):
        self.debug_active = debug
        self.history = history
        self.error: Optional[str] = None
        self.status: str = ""
        self._debug_lines: List[str] = []
        self._count = 0

    @property
    def debug_lines(self) -> List[str]:
        return list(self._debug_lines)

    def debug(self, text: str, *args) -> None:
        if args:
            text = text % args
        self._count += 1
        logger.debug(text)
        if not self.debug_active:
            return
        self._debug_lines.append(f"{self._count}: {text}")
        if len(self._debug_lines) > self.history:
            self._debug_lines = self._debug_lines[-self.history:]

    def add_error(self, text: str) -> None:
        text = text.strip()
        if not text:
            return
        logger.info("status: %s", text)
        self.error = text

    def clear_error(self) -> None:
        self.error = None

    def set_status(self, text: str) -> None:
        """Persistent status-bar text, e.g. the active client"""
        self.status = text
