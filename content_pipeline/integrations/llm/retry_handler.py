"""
Retry handler for generator requests.

This module provides the retry policy wrapped around every external call of
the pipeline. Only rate-limit signals are retried, with a fixed backoff;
every other failure surfaces immediately.
"""

import asyncio
import logging
from typing import Callable, Any

from litellm import exceptions as litellm_exceptions

from ...core.models.errors import MaxRetriesExceededError, RateLimitError


logger = logging.getLogger(__name__)

RATE_LIMIT_PATTERNS = ("rate limit", "too many requests", "429")


def is_rate_limit_error(error: Exception) -> bool:
    """
    Check if an error signals that the external service is rate limiting us.

    Args:
        error: Exception to check

    Returns:
        True for rate-limit errors
    """
    if isinstance(error, (RateLimitError, litellm_exceptions.RateLimitError)):
        return True

    if getattr(error, "status_code", None) == 429:
        return True

    message = str(error).lower()
    return any(pattern in message for pattern in RATE_LIMIT_PATTERNS)


class RetryHandler:
    """
    Fixed-backoff retry handler for rate-limited calls.

    A call that keeps raising rate-limit errors is attempted exactly
    ``max_attempts`` times. Any other error is raised after one attempt.
    """

    def __init__(self, max_attempts: int = 3, backoff_seconds: float = 60.0):
        """
        Initialize retry handler.

        Args:
            max_attempts: Total number of attempts, first call included
            backoff_seconds: Delay between rate-limited attempts
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds

        logger.debug(
            f"RetryHandler initialized with max_attempts: {max_attempts}, "
            f"backoff: {backoff_seconds}s"
        )

    async def execute_with_retry(
        self,
        func: Callable,
        *args,
        **kwargs
    ) -> Any:
        """
        Execute function with retry logic.

        Args:
            func: Function to execute
            *args: Function arguments
            **kwargs: Function keyword arguments

        Returns:
            Function result

        Raises:
            MaxRetriesExceededError: If every attempt was rate limited
            Exception: Any non rate-limit error raised by ``func``
        """
        last_exception = None
        name = getattr(func, "__qualname__", repr(func))

        for attempt in range(1, self.max_attempts + 1):
            try:
                if asyncio.iscoroutinefunction(func):
                    result = await func(*args, **kwargs)
                else:
                    result = func(*args, **kwargs)

                if attempt > 1:
                    logger.info(f"{name} succeeded on attempt {attempt}")

                return result

            except Exception as e:
                if not is_rate_limit_error(e):
                    raise

                last_exception = e

                if attempt >= self.max_attempts:
                    logger.error(f"{name}: all {self.max_attempts} attempts rate limited")
                    break

                logger.warning(
                    f"{name} rate limited (attempt {attempt}/{self.max_attempts}). "
                    f"Retrying in {self.backoff_seconds:.0f} seconds..."
                )

                await asyncio.sleep(self.backoff_seconds)

        raise MaxRetriesExceededError(
            f"max retries exceeded after {self.max_attempts} attempts: {last_exception}",
            attempts=self.max_attempts
        ) from last_exception
