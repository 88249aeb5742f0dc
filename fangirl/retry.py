"""
Retry utilities for Spotify API calls.

Every remote call made by fangirl goes through ``retry_call``. A run can last
hours and make thousands of requests, so any failure is retried after a fixed
delay: 5xx and 429 responses from Spotify are transient and a plain wait is
enough to get past them.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, TypeVar

# Configuration
DEFAULT_MAX_RETRIES = 60  # Retries after the first attempt
DEFAULT_RETRY_DELAY = 30.0  # Seconds between attempts; 60 x 30s is ~30 minutes

T = TypeVar("T")

logger = logging.getLogger(__name__)


def retry_call(
    func: Callable[..., T],
    *args: Any,
    max_retries: int = DEFAULT_MAX_RETRIES,
    delay: float = DEFAULT_RETRY_DELAY,
    sleep: Callable[[float], None] = time.sleep,
    **kwargs: Any,
) -> T:
    """
    Execute a function, retrying on any exception with a fixed delay.

    The function is attempted at most ``max_retries + 1`` times. There is no
    backoff and no jitter, and errors are not classified.

    Args:
        func: The function to call
        *args: Positional arguments to pass to func
        max_retries: Retry attempts allowed after the first try
        delay: Seconds to wait between attempts
        sleep: Sleep function (injectable for tests)
        **kwargs: Keyword arguments to pass to func

    Returns:
        The result of func(*args, **kwargs)

    Raises:
        ValueError: If max_retries or delay is negative
        Exception: The last error raised by func once retries are exhausted
    """
    if max_retries < 0:
        raise ValueError(f"max_retries must be non-negative, got {max_retries}")
    if delay < 0:
        raise ValueError(f"delay must be non-negative, got {delay}")

    fn_name = getattr(func, "__name__", repr(func))

    attempt = 0
    while True:
        try:
            return func(*args, **kwargs)
        except Exception as e:
            if attempt >= max_retries:
                logger.error(f"{fn_name}() failed after {attempt + 1} attempts: {e}")
                raise
            attempt += 1
            logger.warning(
                f"{fn_name}() failed: {e} - retrying in {delay:.1f}s "
                f"(retry {attempt}/{max_retries})"
            )
            sleep(delay)


class Retrier:
    """
    Holds retry settings so call sites don't repeat them.

    Usage:
        retrier = Retrier(max_retries=5, delay=2)
        page = retrier.call(sp.current_user_saved_albums, limit=50)
    """

    def __init__(
        self,
        max_retries: int = DEFAULT_MAX_RETRIES,
        delay: float = DEFAULT_RETRY_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_retries < 0:
            raise ValueError(f"max_retries must be non-negative, got {max_retries}")
        if delay < 0:
            raise ValueError(f"delay must be non-negative, got {delay}")
        self.max_retries = max_retries
        self.delay = delay
        self.sleep = sleep

    def call(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Execute a call with retries."""
        return retry_call(
            func, *args,
            max_retries=self.max_retries,
            delay=self.delay,
            sleep=self.sleep,
            **kwargs
        )
