"""
Credential cache for the Noji API.

Holds a single bearer token with a local expiry and refreshes it via the
supplied login coroutine. Concurrent callers that need a refresh share one
in-flight login task and all receive its token or its exception.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional

from ..domain.errors import AuthError
from ..domain.models import Credential

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TTL = timedelta(hours=23)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CredentialCache:
    """Single-flight token cache."""

    def __init__(
        self,
        login: Callable[[], Awaitable[str]],
        ttl: timedelta = DEFAULT_TOKEN_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._login = login
        self._ttl = ttl
        self._clock = clock
        self._credential: Optional[Credential] = None
        self._refresh: Optional["asyncio.Future[str]"] = None

    @property
    def credential(self) -> Optional[Credential]:
        return self._credential

    @property
    def refresh_in_progress(self) -> bool:
        return self._refresh is not None

    async def get_valid_token(self, force_refresh: bool = False) -> str:
        """Return a usable token, logging in only when needed.

        Args:
            force_refresh: Skip the cached credential and log in again.

        Raises:
            AuthError: If the login fails or returns no token.
        """
        credential = self._credential
        if (
            credential is not None
            and not force_refresh
            and credential.is_valid(self._clock())
        ):
            logger.debug("Using cached Noji token")
            return credential.token

        if self._refresh is None:
            if credential is None:
                logger.info("No cached Noji token, logging in")
            elif force_refresh:
                logger.info("Forced Noji token refresh, logging in")
            else:
                logger.info("Noji token expired, logging in again")
            self._refresh = asyncio.ensure_future(self._login_and_store())
        else:
            logger.debug("Token refresh already in flight, waiting on it")

        # shield: a cancelled waiter must not cancel the refresh for the others
        return await asyncio.shield(self._refresh)

    async def _login_and_store(self) -> str:
        try:
            try:
                token = await self._login()
            except AuthError:
                raise
            except Exception as e:
                raise AuthError(f"Noji login failed: {e}") from e

            if not token:
                raise AuthError("Login response did not contain a token")

            self._credential = Credential(
                token=token, expires_at=self._clock() + self._ttl
            )
            logger.info("Noji login successful, token cached for %s", self._ttl)
            return token
        except AuthError as e:
            logger.error("Noji login failed: %s", e)
            raise
        finally:
            self._refresh = None

    def clear(self) -> None:
        """Drop the cached credential."""
        self._credential = None
