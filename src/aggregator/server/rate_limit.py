"""
Interval rate limiter for the mock telemetry API.
"""

import time
from typing import Callable, Optional, Tuple

import structlog

logger = structlog.get_logger(__name__)


class IntervalRateLimiter:
    """
    Admits at most one request per ``min_interval_ms``.

    State belongs to the limiter instance; each app owns its own limiter.
    A rejected request does not move the window.
    """

    def __init__(
        self,
        min_interval_ms: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        if min_interval_ms < 0:
            raise ValueError("min_interval_ms must be non-negative")
        self.min_interval_ms = min_interval_ms
        self._clock = clock
        self._last_admitted_ms: Optional[float] = None

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def check(self) -> Tuple[bool, Optional[float]]:
        """
        Try to admit a request.

        Returns:
            Tuple (allowed, milliseconds since the last admitted request or None)
        """
        now = self._now_ms()

        if self._last_admitted_ms is None:
            self._last_admitted_ms = now
            return True, None

        elapsed = now - self._last_admitted_ms
        if elapsed < self.min_interval_ms:
            logger.warning("mock_rate_limited", since_last_ms=round(elapsed))
            return False, elapsed

        self._last_admitted_ms = now
        return True, elapsed
