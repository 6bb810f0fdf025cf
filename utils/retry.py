"""
Capped retry with exponential backoff and jitter.

Used for every network call the checker makes: store navigation,
ranking pages and the translation endpoint.
"""

import logging
import random
import time
from typing import Callable, TypeVar

from config.settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay: float, jitter: float = settings.RETRY_JITTER) -> float:
    """Seconds to wait after failed attempt number `attempt` (1-based)."""
    return base_delay * (2 ** (attempt - 1)) + random.uniform(0, jitter)


def with_retry(
    fn: Callable[[], T],
    max_retries: int = settings.MAX_RETRIES,
    base_delay: float = settings.RETRY_BASE_DELAY,
    name: str = "operation",
) -> T:
    """
    Call `fn` up to `max_retries` times.

    Sleeps base, 2*base, 4*base... (+ up to RETRY_JITTER seconds) between
    attempts. The error of the final attempt is re-raised unchanged.
    """
    for attempt in range(1, max_retries + 1):
        try:
            return fn()
        except Exception as e:
            if attempt >= max_retries:
                raise
            wait = backoff_delay(attempt, base_delay)
            logger.warning(
                f"[retry] {name} attempt {attempt}/{max_retries} failed: {e}. "
                f"Retrying in {wait:.1f}s"
            )
            time.sleep(wait)
    raise ValueError(f"max_retries must be >= 1, got {max_retries}")
