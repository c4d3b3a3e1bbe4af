"""Retry utilities for handling transient failures."""

import time
import logging
from functools import wraps
from typing import Callable, Optional, Type, Union, Tuple

from .exceptions import NotifierError

logger = logging.getLogger(__name__)

def retry_with_backoff(
    retries: int = 3,
    backoff_in_seconds: float = 1,
    max_backoff_in_seconds: float = 30,
    exceptions_to_check: Union[Type[Exception], Tuple[Type[Exception], ...]] = NotifierError,
    exceptions_to_raise: Union[Type[Exception], Tuple[Type[Exception], ...]] = (),
    sleep: Optional[Callable[[float], None]] = None,
):
    """
    Retry decorator with exponential backoff.

    Args:
        retries: Total number of attempts
        backoff_in_seconds: Wait before the second attempt
        max_backoff_in_seconds: Maximum backoff time in seconds
        exceptions_to_check: Exception or tuple of exceptions to retry on
        exceptions_to_raise: Subclasses of ``exceptions_to_check`` that are never retried
        sleep: Sleep function, defaults to time.sleep
    """
    if retries < 1:
        raise ValueError(f"retries must be at least 1, got {retries}")

    def decorator(func: Callable):
        name = getattr(func, "__name__", repr(func))

        @wraps(func)
        def wrapper(*args, **kwargs):
            attempt = 0
            backoff = min(backoff_in_seconds, max_backoff_in_seconds)

            while True:
                try:
                    return func(*args, **kwargs)
                except exceptions_to_raise:
                    raise
                except exceptions_to_check as e:
                    attempt += 1

                    if attempt >= retries:
                        logger.error(f"Giving up on {name} after {attempt} attempts: {e}")
                        raise

                    logger.warning(
                        f"{name} attempt {attempt}/{retries} failed, "
                        f"next try in {backoff}s: {e}"
                    )

                    (sleep or time.sleep)(backoff)
                    backoff = min(backoff * 2, max_backoff_in_seconds)

        return wrapper

    return decorator
