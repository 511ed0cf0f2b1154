"""Value objects shared by the credential, card and scheduling services."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Credential:
    """Bearer token for the Noji API with its local expiry."""

    token: str
    expires_at: datetime

    def is_valid(self, now: datetime) -> bool:
        return self.expires_at > now


@dataclass(frozen=True)
class Card:
    """One flashcard. ``definition`` is already Telegram HTML."""

    word: str
    definition: str


@dataclass(frozen=True)
class CardCollection:
    """Cached result of one fetch cycle.

    Empty collections may be stored but are never trusted as a cache hit.
    """

    cards: Tuple[Card, ...]
    expires_at: datetime

    def is_fresh(self, now: datetime) -> bool:
        return bool(self.cards) and self.expires_at > now


@dataclass
class DeliveryState:
    """Process-wide record of the last successful delivery."""

    last_delivered_at: Optional[datetime] = None

    def hours_since_last_delivery(self, now: datetime) -> Optional[float]:
        if self.last_delivered_at is None:
            return None
        return (now - self.last_delivered_at).total_seconds() / 3600.0


@dataclass
class CacheInfo:
    """Introspection view of the card cache."""

    cached: bool
    expires_at: Optional[datetime] = None
    expires_in: Optional[str] = None
    count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        if not self.cached:
            return {"cached": False}
        return {
            "cached": True,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "expires_in": self.expires_in,
            "count": self.count,
        }
