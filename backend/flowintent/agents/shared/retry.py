"""
Fixed-count retry with exponential backoff for outbound provider calls.
"""

import time
from typing import Callable, Optional, TypeVar

from .errors import is_retryable
from .structured_logger import get_logger

T = TypeVar("T")

logger = get_logger("Retry")


def backoff_delay(attempt: int, initial_delay: float = 0.2, factor: float = 2.0, max_delay: float = 10.0) -> float:
    """Delay before retry number ``attempt`` (0-based), capped at max_delay"""
    return min(initial_delay * (factor ** attempt), max_delay)


def with_retry(
    fn: Callable[[], T],
    retries: int = 2,
    initial_delay: float = 0.2,
    factor: float = 2.0,
    max_delay: float = 10.0,
    provider: Optional[str] = None,
    sleep: Callable[[float], None] = time.sleep
) -> T:
    """
    Call ``fn`` and retry retryable failures

    Args:
        fn: Zero-argument callable
        retries: Extra attempts after the first one
        initial_delay: First backoff delay in seconds
        factor: Backoff multiplier
        max_delay: Upper bound for a single delay
        provider: Provider name for log records
        sleep: Sleep function (injectable for tests)

    Returns:
        Whatever ``fn`` returns

    Raises:
        The last error once attempts are exhausted, or the first
        non-retryable error immediately.
    """
    for attempt in range(retries + 1):
        try:
            return fn()
        except Exception as e:
            if not is_retryable(e) or attempt == retries:
                raise

            delay = backoff_delay(attempt, initial_delay, factor, max_delay)
            logger.warning(
                "Retrying provider call",
                provider=provider or "unknown",
                attempt=attempt + 1,
                max_attempts=retries + 1,
                delay_seconds=delay,
                error=str(e),
                error_type=type(e).__name__
            )
            sleep(delay)

    # Unreachable: the loop either returns or raises
    raise RuntimeError("with_retry exhausted without result")
