"""
Unit tests for the batch rate limiter.
"""

import time

import pytest

from secondlook.core.limits import TokenBucketRateLimiter


class TestTokenBucketRateLimiter:
    """Test token bucket rate limiter implementation."""

    @pytest.mark.asyncio
    async def test_rate_limiter_basic(self):
        """Requests beyond the burst wait for a new token."""
        # 60 requests per minute = 1 per second
        limiter = TokenBucketRateLimiter(60)

        # Consume burst tokens first (bucket_size is 60/10 = 6)
        for _ in range(int(limiter.bucket_size)):
            await limiter.acquire()

        start_time = time.time()
        await limiter.acquire()
        assert time.time() - start_time >= 0.9

    @pytest.mark.asyncio
    async def test_rate_limiter_burst(self):
        """A burst up to the bucket size goes through immediately."""
        limiter = TokenBucketRateLimiter(600)

        start_time = time.time()
        for _ in range(5):
            await limiter.acquire()

        assert time.time() - start_time < 0.5

    def test_rate_limiter_initialization(self):
        limiter = TokenBucketRateLimiter(120)

        assert limiter.requests_per_minute == 120
        assert limiter.tokens_per_second == 2.0
        assert limiter.bucket_size == 12.0
        assert limiter.tokens == limiter.bucket_size

    def test_small_budgets_keep_one_token(self):
        assert TokenBucketRateLimiter(5).bucket_size == 1.0

    @pytest.mark.parametrize("value", [0, -3])
    def test_rejects_non_positive_rates(self, value):
        with pytest.raises(ValueError, match="at least 1"):
            TokenBucketRateLimiter(value)
