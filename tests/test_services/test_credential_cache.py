"""Tests for the single-flight credential cache."""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from conftest import FakeClock
from noji_srs.domain.errors import AuthError
from noji_srs.services.credential_cache import CredentialCache


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 20, 3, 0, tzinfo=timezone.utc))


class TestCachedToken:
    @pytest.mark.asyncio
    async def test_cached_token_skips_login(self, clock):
        login = AsyncMock(return_value="tok-1")
        cache = CredentialCache(login, ttl=timedelta(hours=23), clock=clock)

        assert await cache.get_valid_token() == "tok-1"
        clock.advance(hours=22)
        assert await cache.get_valid_token() == "tok-1"

        assert login.await_count == 1

    @pytest.mark.asyncio
    async def test_expired_token_logs_in_again(self, clock):
        login = AsyncMock(side_effect=["tok-1", "tok-2"])
        cache = CredentialCache(login, ttl=timedelta(hours=23), clock=clock)

        await cache.get_valid_token()
        clock.advance(hours=23)

        assert await cache.get_valid_token() == "tok-2"
        assert login.await_count == 2
        assert cache.credential.expires_at == clock.now + timedelta(hours=23)

    @pytest.mark.asyncio
    async def test_force_refresh_bypasses_valid_token(self, clock):
        login = AsyncMock(side_effect=["tok-1", "tok-2"])
        cache = CredentialCache(login, clock=clock)

        await cache.get_valid_token()
        assert await cache.get_valid_token(force_refresh=True) == "tok-2"
        assert login.await_count == 2

    @pytest.mark.asyncio
    async def test_clear_drops_credential(self, clock):
        login = AsyncMock(side_effect=["tok-1", "tok-2"])
        cache = CredentialCache(login, clock=clock)

        await cache.get_valid_token()
        cache.clear()

        assert cache.credential is None
        assert await cache.get_valid_token() == "tok-2"


class TestLoginFailure:
    @pytest.mark.asyncio
    async def test_failure_raises_auth_error_and_caches_nothing(self, clock):
        login = AsyncMock(side_effect=[AuthError("bad password"), "tok-2"])
        cache = CredentialCache(login, clock=clock)

        with pytest.raises(AuthError, match="bad password"):
            await cache.get_valid_token()
        assert cache.credential is None
        assert not cache.refresh_in_progress

        assert await cache.get_valid_token() == "tok-2"

    @pytest.mark.asyncio
    async def test_empty_token_is_an_auth_error(self, clock):
        cache = CredentialCache(AsyncMock(return_value=""), clock=clock)

        with pytest.raises(AuthError, match="did not contain a token"):
            await cache.get_valid_token()
        assert cache.credential is None

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_wrapped(self, clock):
        cache = CredentialCache(AsyncMock(side_effect=ConnectionError("down")), clock=clock)

        with pytest.raises(AuthError) as exc_info:
            await cache.get_valid_token()
        assert isinstance(exc_info.value.__cause__, ConnectionError)


class TestSingleFlight:
    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_login(self, clock):
        calls = 0

        async def login():
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.01)
            return "shared-token"

        cache = CredentialCache(login, clock=clock)
        results = await asyncio.gather(*(cache.get_valid_token() for _ in range(5)))

        assert calls == 1
        assert results == ["shared-token"] * 5
        assert not cache.refresh_in_progress

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_failure(self, clock):
        calls = 0

        async def login():
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.01)
            raise AuthError("login rejected")

        cache = CredentialCache(login, clock=clock)
        results = await asyncio.gather(
            *(cache.get_valid_token() for _ in range(4)), return_exceptions=True
        )

        assert calls == 1
        assert all(isinstance(r, AuthError) for r in results)
        assert len({id(r) for r in results}) == 1

    @pytest.mark.asyncio
    async def test_forced_refresh_joins_inflight_login(self, clock):
        calls = 0

        async def login():
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.01)
            return f"tok-{calls}"

        cache = CredentialCache(login, clock=clock)
        results = await asyncio.gather(
            cache.get_valid_token(), cache.get_valid_token(force_refresh=True)
        )

        assert calls == 1
        assert results == ["tok-1", "tok-1"]
