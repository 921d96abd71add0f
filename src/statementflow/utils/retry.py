"""Retry decorator for rate-limited backends."""
import functools
import logging
import math
import re
import time
from typing import Callable, Optional

from .exceptions import QuotaExceededError, RateLimitedError
from .logger import get_logger, log_event

module_logger = get_logger("retry")

# "Please try again in 3.28s" / "Please try again in 1m2.5s"
RETRY_HINT_PATTERN = re.compile(r"try again in (?:(\d+)m)?(\d+(?:\.\d+)?)s", re.IGNORECASE)


def parse_retry_after(message: str) -> Optional[float]:
    """Return the backend's suggested wait in seconds, or None if absent."""
    if not message:
        return None
    match = RETRY_HINT_PATTERN.search(message)
    if not match:
        return None
    minutes = int(match.group(1)) if match.group(1) else 0
    return minutes * 60 + float(match.group(2))


def compute_wait_ms(message: str, default_delay_ms: int = 5000, buffer_ms: int = 1000) -> int:
    """Wait derived from the hint plus a buffer; the default when unparseable."""
    seconds = parse_retry_after(message)
    if seconds is None:
        return default_delay_ms
    return math.ceil(seconds * 1000) + buffer_ms


def retry_on_rate_limit(
    max_attempts: int = 3,
    default_delay_ms: int = 5000,
    buffer_ms: int = 1000,
    logger: Optional[logging.Logger] = None,
):
    """
    Decorator retrying a backend call on RateLimitedError.

    Args:
        max_attempts: Total number of calls, including the first
        default_delay_ms: Wait used when the error carries no retry hint
        buffer_ms: Added to the hinted wait
        logger: Logger for retry events, defaults to the module logger

    Raises QuotaExceededError with the last error once attempts run out.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
    log = logger or module_logger

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            last_error: Optional[RateLimitedError] = None

            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except RateLimitedError as e:
                    last_error = e
                    if attempt == max_attempts:
                        break

                    wait_ms = compute_wait_ms(e.message, default_delay_ms, buffer_ms)
                    log_event(
                        log,
                        "provider.retry",
                        level=logging.WARNING,
                        provider=e.provider,
                        attempt=attempt,
                        max_attempts=max_attempts,
                        wait_ms=wait_ms,
                    )
                    time.sleep(wait_ms / 1000)

            log.error(f"Rate limit persisted after {max_attempts} attempts in {func.__name__}")
            raise QuotaExceededError(
                f"Rate limit exceeded after {max_attempts} attempts: {last_error.message}",
                provider=last_error.provider,
                status_code=last_error.status_code,
            ) from last_error

        return wrapper
    return decorator
