"""Clock providers."""

import logging
import time

from ..core.exceptions import ClockUnavailableError
from ..core.types import Timestamp
from .base import ClockProvider

logger = logging.getLogger(__name__)


class SystemClock(ClockProvider):
    """Host wall clock, truncated to whole seconds."""

    def now(self) -> Timestamp | None:
        return int(time.time())


class FixedClock(ClockProvider):
    """
    Manually driven clock.

    Time never moves backwards: ``set`` and ``advance`` reject regressions.
    """

    def __init__(self, timestamp: Timestamp = 0):
        self._timestamp = timestamp

    def now(self) -> Timestamp | None:
        return self._timestamp

    def set(self, timestamp: Timestamp) -> None:
        """Move the clock to ``timestamp``."""
        if timestamp < self._timestamp:
            raise ClockUnavailableError(
                f"clock cannot move backwards ({self._timestamp} -> {timestamp})", now=timestamp
            )
        logger.debug(f"Clock set to {timestamp}")
        self._timestamp = timestamp

    def advance(self, seconds: int) -> Timestamp:
        """Move the clock forward by ``seconds`` and return the new time."""
        self.set(self._timestamp + seconds)
        return self._timestamp
