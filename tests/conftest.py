import json
import logging
import logging.handlers
import os
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Tuple

import httpx
import pytest
import pytest_asyncio

# Set test environment variables
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["TELEGRAM_BOT_TOKEN"] = "test:token"
os.environ["TELEGRAM_CHAT_ID"] = "-100123"
os.environ["NOJI_EMAIL"] = "learner@example.com"
os.environ["NOJI_PASSWORD"] = "secret"
os.environ["NOJI_DECK_ID"] = "101,202"

from noji_srs.core.config import Settings  # noqa: E402
from noji_srs.core.container import reset_container  # noqa: E402
from noji_srs.services.noji_client import NojiClient  # noqa: E402


@pytest.fixture(autouse=True)
def _strip_file_handlers():
    """Remove file handlers from root logger so tests never write to logs/app.log."""
    root = logging.getLogger()
    saved = [h for h in root.handlers if isinstance(h, logging.FileHandler)]
    for h in saved:
        root.removeHandler(h)
    yield
    for h in list(root.handlers):
        if isinstance(h, logging.FileHandler):
            root.removeHandler(h)
    for h in saved:
        root.addHandler(h)


@pytest.fixture(autouse=True)
def _fresh_container():
    """Each test starts with an empty service container."""
    reset_container()
    yield
    reset_container()


class FakeClock:
    """Settable clock returning timezone-aware datetimes."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeNojiAPI:
    """In-memory stand-in for the Noji REST API, served via httpx.MockTransport."""

    def __init__(self):
        self.logins = 0
        self.login_response: Tuple[int, dict] = (200, {})
        self.decks: Dict[str, List[dict]] = {}
        # Queued (status, body) responses returned before a deck's real data
        self.deck_failures: Dict[str, List[Tuple[int, dict]]] = {}
        self.requests: List[httpx.Request] = []
        self.created_notes: List[dict] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path.endswith("/authentication/login_with_provider"):
            self.logins += 1
            status, body = self.login_response
            if status == 200 and not body:
                body = {"token": f"token-{self.logins}"}
            return httpx.Response(status, json=body)

        if path.endswith("/notes") and request.method == "GET":
            deck_id = request.url.params["deck_id"]
            queued = self.deck_failures.get(deck_id)
            if queued:
                status, body = queued.pop(0)
                return httpx.Response(status, json=body)
            offset = int(request.url.params["offset"])
            limit = int(request.url.params["limit"])
            return httpx.Response(200, json=self.decks.get(deck_id, [])[offset : offset + limit])

        if path.endswith("/notes") and request.method == "POST":
            self.created_notes.append(json.loads(request.content))
            return httpx.Response(201, json={"id": len(self.created_notes)})

        return httpx.Response(404, json={"error": "not found"})

    def note_requests(self, deck_id: str) -> List[httpx.Request]:
        return [
            r
            for r in self.requests
            if r.method == "GET"
            and r.url.path.endswith("/notes")
            and r.url.params.get("deck_id") == deck_id
        ]

    def private(self, deck_id: str, times: int) -> None:
        self.deck_failures[deck_id] = [
            (422, {"error": "This deck is private"}) for _ in range(times)
        ]


def make_note(word: str, definition: str) -> dict:
    return {"front": {"preview": word}, "back": {"preview": definition}}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        noji_email="learner@example.com",
        noji_password="secret",
        noji_deck_id="101,202",
        noji_vocab_deck_id="101",
        noji_sentence_deck_id="202",
        noji_page_size=2,
        telegram_bot_token="test:token",
        telegram_chat_id="-100123",
        gemini_api_key="test-gemini-key",
        timezone="Asia/Saigon",
        work_weekdays="1,2,3,4,5",
        work_hour_start=9,
        work_hour_end=18,
        send_probability=0.2,
        max_gap_minutes=15,
        card_cache_ttl_minutes=60,
    )


@pytest.fixture
def fake_noji() -> FakeNojiAPI:
    return FakeNojiAPI()


@pytest.fixture
def utc_clock() -> FakeClock:
    return FakeClock(datetime(2026, 10, 20, 3, 0, tzinfo=timezone.utc))


@pytest_asyncio.fixture
async def noji_client(settings, fake_noji):
    client = NojiClient(settings, transport=httpx.MockTransport(fake_noji.handler))
    yield client
    await client.aclose()
