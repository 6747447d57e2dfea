"""
Minimum-interval rate limiter for outbound webhook/vendor calls
"""

import threading
import time
from typing import Callable, Optional


class MinIntervalRateLimiter:
    """
    Serializes calls of one client so that consecutive calls are at least
    ``min_interval_seconds`` apart

    Example:
        >>> limiter = MinIntervalRateLimiter(1.0)
        >>> limiter.wait()  # returns immediately
        >>> limiter.wait()  # blocks ~1s
    """

    def __init__(
        self,
        min_interval_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep
    ):
        if min_interval_seconds < 0:
            raise ValueError("min_interval_seconds must be >= 0")

        self.min_interval = min_interval_seconds
        self._clock = clock
        self._sleep = sleep
        self._last_call: Optional[float] = None
        self._lock = threading.Lock()

    def wait(self) -> float:
        """
        Block until the interval since the previous call has elapsed

        Returns:
            Seconds slept (0 when no wait was needed)
        """
        with self._lock:
            slept = 0.0
            now = self._clock()

            if self._last_call is not None:
                remaining = self.min_interval - (now - self._last_call)
                if remaining > 0:
                    self._sleep(remaining)
                    slept = remaining
                    now = self._clock()

            self._last_call = now
            return slept

    def reset(self) -> None:
        with self._lock:
            self._last_call = None
