"""
Noji API client.

Thin httpx wrapper that:
- sends the headers the Noji web app sends, plus a ``current-time`` stamp
- logs in and owns the CredentialCache for the bearer token
- replays a request once with a forced fresh token on 401/422
- maps failures to AuthError / FetchError / PrivateDeckError
"""

import logging
import time
from datetime import timedelta
from typing import Any, Dict, Optional

import httpx

from ..core.config import Settings, get_settings
from ..domain.errors import AuthError, FetchError, PrivateDeckError
from .credential_cache import CredentialCache

logger = logging.getLogger(__name__)

LOGIN_PATH = "/authentication/login_with_provider"
NOTES_PATH = "/notes"

# Statuses after which the request is replayed once with a fresh token
AUTH_RETRY_STATUSES = (401, 422)

PRIVATE_DECK_MARKER = "this deck is private"

_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/142.0.0.0 Safari/537.36"
)


def _default_headers(web_url: str) -> Dict[str, str]:
    return {
        "accept": "*/*",
        "accept-language": "en-US,en;q=0.6",
        "app-features": "clozeCardV2,hierarchySchemaV2,imageOcclusion,cardPresets",
        "app-language": "en",
        "app-platform": "Mac OS",
        "app-version": "2.14.0",
        "content-type": "application/json",
        "origin": web_url,
        "referer": f"{web_url}/",
        "user-agent": _USER_AGENT,
    }


def is_private_deck_response(response: httpx.Response) -> bool:
    """True if Noji rejected the request because the deck is private."""
    if response.status_code != 422:
        return False
    return PRIVATE_DECK_MARKER in response.text.lower()


class NojiClient:
    """Async client for the Noji REST API."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._client = httpx.AsyncClient(
            base_url=self.settings.noji_base_url,
            headers=_default_headers(self.settings.noji_web_url),
            timeout=self.settings.noji_http_timeout_seconds,
            transport=transport,
            event_hooks={"request": [self._stamp_current_time]},
        )
        self.credentials = CredentialCache(
            self.login, ttl=timedelta(hours=self.settings.token_ttl_hours)
        )

    @staticmethod
    async def _stamp_current_time(request: httpx.Request) -> None:
        request.headers["current-time"] = str(int(time.time()))

    async def login(self) -> str:
        """Log in with the configured email/password and return the token.

        Raises:
            AuthError: On transport failure, non-2xx status, or missing token.
        """
        logger.info("Logging in to Noji API...")
        try:
            response = await self._client.post(
                LOGIN_PATH,
                json={
                    "provider": "email",
                    "email": self.settings.noji_email,
                    "password": self.settings.noji_password,
                },
            )
        except httpx.HTTPError as e:
            raise AuthError(f"Login request failed: {type(e).__name__}: {e}") from e

        if response.is_error:
            raise AuthError(f"Login failed with status {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise AuthError("Login response was not JSON") from e

        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise AuthError("Login response did not contain a token")
        return token

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send an authenticated request and return the decoded JSON body.

        Raises:
            AuthError: If a token cannot be obtained.
            PrivateDeckError: On a 422 private-deck response after the replay.
            FetchError: On any other failure.
        """
        token = await self.credentials.get_valid_token()
        response = await self._send(method, path, token, params=params, json=json)

        if response.status_code in AUTH_RETRY_STATUSES:
            logger.info(
                "Token expired or access issue (%d) on %s, re-authenticating...",
                response.status_code,
                path,
            )
            token = await self.credentials.get_valid_token(force_refresh=True)
            logger.info("Re-authentication successful, retrying request")
            response = await self._send(method, path, token, params=params, json=json)

        if response.is_error:
            logger.error(
                "API Error: %s %s -> %d %s",
                method,
                path,
                response.status_code,
                response.text[:200],
            )
            if is_private_deck_response(response):
                deck_id = (params or {}).get("deck_id")
                raise PrivateDeckError(deck_id=deck_id)
            raise FetchError(
                f"{method} {path} failed with status {response.status_code}",
                status_code=response.status_code,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise FetchError(f"{method} {path} returned invalid JSON") from e

    async def _send(
        self,
        method: str,
        path: str,
        token: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        try:
            return await self._client.request(
                method,
                path,
                params=params,
                json=json,
                headers={"authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as e:
            raise FetchError(f"{method} {path} failed: {type(e).__name__}: {e}") from e

    async def list_notes(self, deck_id: str, offset: int, limit: int) -> Any:
        """One page of learning notes for a deck, newest first."""
        return await self.request(
            "GET",
            NOTES_PATH,
            params={
                "deck_id": deck_id,
                "frozen": "false",
                "learning_state": "learning",
                "limit": limit,
                "offset": offset,
                "order": "DESC",
                "sort_by": "created_at",
            },
        )

    async def create_note(self, front_html: str, back_html: str, deck_id: str) -> Any:
        """Create a front-to-back note in the given deck."""
        return await self.request(
            "POST",
            NOTES_PATH,
            json={
                "note": {
                    "template_id": "front_to_back",
                    "fields": {
                        "front_side": front_html,
                        "back_side": back_html,
                    },
                    "deck_id": int(deck_id),
                    "field_attachments_map": {},
                    "reverse": False,
                }
            },
        )

    async def aclose(self) -> None:
        await self._client.aclose()
