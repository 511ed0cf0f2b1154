"""
Tests for retry utilities.
"""

from unittest.mock import AsyncMock, patch

import pytest

from noji_srs.utils.retry import async_retry, backoff_delay


class TestBackoffDelay:
    """Tests for the backoff calculation."""

    def test_exponential(self):
        assert backoff_delay(0) == 1.0
        assert backoff_delay(1) == 2.0
        assert backoff_delay(2, base_delay=2.0) == 8.0

    def test_capped(self):
        assert backoff_delay(3, base_delay=10.0, max_delay=15.0) == 15.0

    def test_jitter_bounds(self):
        for _ in range(20):
            assert 2.0 <= backoff_delay(0, base_delay=2.0, jitter=0.5) <= 3.0


class TestAsyncRetry:
    """Tests for the async_retry decorator."""

    @pytest.mark.asyncio
    async def test_success_first_try(self):
        func = AsyncMock(return_value="ok")
        func.__name__ = "func"

        wrapped = async_retry(max_attempts=3)(func)

        assert await wrapped() == "ok"
        assert func.await_count == 1

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self):
        func = AsyncMock(side_effect=[ConnectionError("dns"), "ok"])
        func.__name__ = "func"

        with patch("noji_srs.utils.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
            result = await async_retry(max_attempts=3, jitter=False)(func)()

        assert result == "ok"
        sleep.assert_awaited_once_with(1.0)

    @pytest.mark.asyncio
    async def test_exhausted_raises_last_exception(self):
        func = AsyncMock(side_effect=ConnectionError("down"))
        func.__name__ = "func"

        with patch("noji_srs.utils.retry.asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(ConnectionError, match="down"):
                await async_retry(max_attempts=2)(func)()

        assert func.await_count == 2

    @pytest.mark.asyncio
    async def test_non_retryable_propagates_immediately(self):
        func = AsyncMock(side_effect=ValueError("bad"))
        func.__name__ = "func"

        with pytest.raises(ValueError):
            await async_retry(max_attempts=3)(func)()

        assert func.await_count == 1
