"""
Card Service - cached source of due Noji cards.

Fetches the "learning" notes of every configured deck, keeps them in memory
for CARD_CACHE_TTL and hands out random cards to the scheduler.

Private decks: Noji answers 422 "This deck is private" when a session lost
access to a deck. The first such deck in a fetch cycle triggers one forced
re-login and a retry of that deck; any deck still private after that, or
any later private deck, is skipped so the other decks still get cached.
"""

import logging
import random
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..core.config import Settings, get_settings
from ..domain.errors import FetchError, PrivateDeckError
from ..domain.models import CacheInfo, Card, CardCollection
from ..utils.formatting import format_definition
from .noji_client import NojiClient

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Field extraction
# ---------------------------------------------------------------------------


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _content_text(side: Any) -> str:
    if not isinstance(side, dict):
        return ""
    content = side.get("content")
    if not isinstance(content, list) or not content:
        return ""
    first = content[0]
    return _text(first.get("text")) if isinstance(first, dict) else ""


def _preview_text(side: Any) -> str:
    return _text(side.get("preview")) if isinstance(side, dict) else ""


WORD_EXTRACTORS = (
    lambda note: _content_text(note.get("front")),
    lambda note: _preview_text(note.get("front")),
    lambda note: _text(note.get("term")),
)

DEFINITION_EXTRACTORS = (
    lambda note: _content_text(note.get("back")),
    lambda note: _preview_text(note.get("back")),
    lambda note: _text(note.get("meaning")),
)


def _first_non_empty(
    note: Dict[str, Any], extractors: Sequence[Callable[[Dict[str, Any]], str]]
) -> str:
    for extract in extractors:
        value = extract(note)
        if value:
            return value
    return ""


def note_to_card(note: Any) -> Optional[Card]:
    """Build a Card from a raw Noji note, or None if either side is empty."""
    if not isinstance(note, dict):
        return None
    word = _first_non_empty(note, WORD_EXTRACTORS)
    raw_definition = _first_non_empty(note, DEFINITION_EXTRACTORS)
    if not word or not raw_definition:
        return None
    return Card(word=word, definition=format_definition(raw_definition))


def _format_remaining(delta: timedelta) -> str:
    seconds = max(int(delta.total_seconds()), 0)
    hours, rest = divmod(seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m {seconds}s"


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class CardService:
    """In-memory cache of due cards across the configured decks."""

    def __init__(
        self,
        client: NojiClient,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = _utcnow,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.client = client
        self.settings = settings or get_settings()
        self._clock = clock
        self._rng = rng or random.Random()
        self._ttl = timedelta(minutes=self.settings.card_cache_ttl_minutes)
        self._cache: Optional[CardCollection] = None

    @property
    def cache(self) -> Optional[CardCollection]:
        return self._cache

    async def get_today_cards(self) -> List[Card]:
        """Return cached cards, fetching from Noji on a miss.

        Raises:
            AuthError: If no token can be obtained.
            FetchError: If a deck fails with anything but a private-deck error.
        """
        now = self._clock()
        cache = self._cache
        if cache is not None:
            logger.debug(
                "Checking cache: count=%d expires_at=%s",
                len(cache.cards),
                cache.expires_at.isoformat(),
            )
            if cache.is_fresh(now):
                logger.info("Using cached cards - No API call (count=%d)", len(cache.cards))
                return list(cache.cards)
            logger.info("Cache expired or empty, fetching fresh data...")
        else:
            logger.info("No cache found, fetching from API...")

        # Token first so an auth failure aborts before any paging
        await self.client.credentials.get_valid_token()

        deck_ids = self.settings.deck_ids
        if not deck_ids:
            raise FetchError("At least one NOJI_DECK_ID is required")

        logger.info("Fetching from %d deck(s)...", len(deck_ids))

        all_cards: List[Card] = []
        relogin_spent = False
        for deck_id in deck_ids:
            try:
                cards = await self._fetch_deck(deck_id)
            except PrivateDeckError:
                if relogin_spent:
                    logger.warning(
                        "Deck %s is private and re-login was already tried, skipping",
                        deck_id,
                    )
                    continue
                relogin_spent = True
                logger.warning(
                    "Deck %s is private, forcing a fresh login and retrying once",
                    deck_id,
                )
                await self.client.credentials.get_valid_token(force_refresh=True)
                try:
                    cards = await self._fetch_deck(deck_id)
                except PrivateDeckError:
                    logger.warning(
                        "Deck %s still private after fresh login, skipping", deck_id
                    )
                    continue
            all_cards.extend(cards)

        logger.info("Total cards fetched from all decks: %d", len(all_cards))

        self._cache = CardCollection(
            cards=tuple(all_cards), expires_at=self._clock() + self._ttl
        )
        logger.info(
            "Cards cached: count=%d expires_at=%s",
            len(all_cards),
            self._cache.expires_at.isoformat(),
        )
        return all_cards

    async def _fetch_deck(self, deck_id: str) -> List[Card]:
        page_size = self.settings.noji_page_size
        cards: List[Card] = []
        offset = 0

        logger.info("Fetching cards from deck %s...", deck_id)

        while True:
            page = await self.client.list_notes(deck_id, offset=offset, limit=page_size)
            if not isinstance(page, list):
                raise FetchError(
                    f"Unexpected notes payload for deck {deck_id}: {type(page).__name__}"
                )
            if not page:
                break

            for note in page:
                card = note_to_card(note)
                if card is not None:
                    cards.append(card)

            offset += page_size
            if len(page) < page_size:
                break

        logger.info("Fetched %d cards from deck %s", len(cards), deck_id)
        return cards

    def get_random_card(self, cards: Sequence[Card]) -> Card:
        """Pick a card uniformly at random.

        Raises:
            ValueError: If ``cards`` is empty.
        """
        if not cards:
            raise ValueError("Cannot pick a card from an empty collection")
        return cards[self._rng.randrange(len(cards))]

    def clear_cache(self) -> None:
        """Discard the cached collection. Safe to call when nothing is cached."""
        if self._cache is not None:
            logger.info("Clearing cache (count=%d)", len(self._cache.cards))
            self._cache = None
        else:
            logger.info("No cache to clear")

    async def refresh_cache(self) -> int:
        """Drop the cache, refetch, and return the number of cards."""
        self.clear_cache()
        cards = await self.get_today_cards()
        return len(cards)

    def get_cache_info(self) -> CacheInfo:
        cache = self._cache
        if cache is None:
            return CacheInfo(cached=False)
        return CacheInfo(
            cached=True,
            expires_at=cache.expires_at,
            expires_in=_format_remaining(cache.expires_at - self._clock()),
            count=len(cache.cards),
        )
