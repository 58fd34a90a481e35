"""
Rate limiting for batch description runs.
"""

import asyncio
import logging
import time

logger = logging.getLogger(__name__)


class TokenBucketRateLimiter:
    """
    Token bucket limiter allowing short bursts up to a tenth of the
    per-minute budget.
    """

    def __init__(self, requests_per_minute: int):
        if requests_per_minute < 1:
            raise ValueError("requests_per_minute must be at least 1")

        self.requests_per_minute = requests_per_minute
        self.tokens_per_second = requests_per_minute / 60.0
        self.bucket_size = max(1.0, requests_per_minute / 10.0)
        self.tokens = self.bucket_size
        self.last_update = time.monotonic()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self.last_update
        self.tokens = min(
            self.bucket_size, self.tokens + elapsed * self.tokens_per_second
        )
        self.last_update = now

    async def acquire(self) -> None:
        """Wait until a token is available and consume it."""
        async with self._lock:
            self._refill()
            if self.tokens < 1:
                wait_time = (1 - self.tokens) / self.tokens_per_second
                logger.debug(f"Rate limit reached, waiting {wait_time:.2f}s")
                await asyncio.sleep(wait_time)
                self._refill()
            self.tokens -= 1
