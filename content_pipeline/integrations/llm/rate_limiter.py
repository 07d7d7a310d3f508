"""
Rate limiter for generator requests.

This module throttles outgoing generator calls on the client side so a
burst of pipeline runs does not trip the provider's own rate limits.
"""

import asyncio
import logging
import time
from typing import Any, Dict


logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Per-minute token bucket.

    Tokens refill continuously at ``requests_per_minute / 60`` per second up
    to ``requests_per_minute``. Each request consumes one token.
    """

    def __init__(self, requests_per_minute: int = 60):
        """
        Initialize rate limiter.

        Args:
            requests_per_minute: Maximum requests per minute
        """
        if requests_per_minute < 1:
            raise ValueError("requests_per_minute must be at least 1")

        self.requests_per_minute = requests_per_minute
        self.tokens = float(requests_per_minute)
        self.last_refill = time.monotonic()

        self.total_requests = 0
        self.delayed_requests = 0

        logger.info(f"RateLimiter initialized: {requests_per_minute}/min")

    async def wait_if_needed(self):
        """Block until a token is available, then consume it."""
        self._refill(time.monotonic())

        if self.tokens < 1:
            wait_time = (1 - self.tokens) * 60 / self.requests_per_minute
            self.delayed_requests += 1
            logger.debug(f"Rate limit reached, waiting {wait_time:.2f} seconds")
            await asyncio.sleep(wait_time)
            self._refill(time.monotonic())

        self.tokens = max(0.0, self.tokens - 1)
        self.total_requests += 1

    def _refill(self, now: float):
        elapsed = now - self.last_refill
        self.tokens = min(
            float(self.requests_per_minute),
            self.tokens + elapsed * self.requests_per_minute / 60
        )
        self.last_refill = now

    def get_stats(self) -> Dict[str, Any]:
        """Get rate limiter statistics."""
        return {
            "total_requests": self.total_requests,
            "delayed_requests": self.delayed_requests,
            "tokens_remaining": int(self.tokens),
            "requests_per_minute_limit": self.requests_per_minute
        }
