"""
Typed domain errors for the card delivery service.

Lower layers raise these instead of returning None so the scheduler tick
can tell an auth failure from a fetch or delivery failure, and so that a
failed tick never records a delivery.
"""

from typing import Optional


class DomainError(Exception):
    """Base class for all domain-specific errors."""


# ---------------------------------------------------------------------------
# Noji API
# ---------------------------------------------------------------------------


class AuthError(DomainError):
    """Login to Noji failed or returned no token."""


class FetchError(DomainError):
    """A Noji API request failed with a non-recoverable status."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class PrivateDeckError(FetchError):
    """Noji answered 422 because the deck is private or not accessible."""

    def __init__(self, deck_id: Optional[str] = None, message: str = "") -> None:
        self.deck_id = deck_id
        super().__init__(message or f"Deck {deck_id} is private", status_code=422)


# ---------------------------------------------------------------------------
# Delivery / generation
# ---------------------------------------------------------------------------


class DeliveryError(DomainError):
    """Telegram failed to send a card message."""


class GenerationError(DomainError):
    """The LLM call for a dictionary entry failed."""
