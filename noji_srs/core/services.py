"""
Service Registry - Central service configuration and registration.

This module wires up all application services with their dependencies.
Services are registered lazily and instantiated on first access.

Usage:
    from noji_srs.core.services import setup_services, get_service

    # At startup
    setup_services()

    # Get a service anywhere
    cards = get_service("cards")
"""

import logging
from typing import Any

from .container import get_container

logger = logging.getLogger(__name__)


def setup_services() -> None:
    """
    Register all application services in the container.

    Call this once at application startup before using any services.
    """
    container = get_container()

    # ========================================================================
    # Core
    # ========================================================================

    def create_settings(c):
        from .config import get_settings

        return get_settings()

    container.register("settings", create_settings)

    # ========================================================================
    # Noji API
    # ========================================================================

    def create_noji_client(c):
        from ..services.noji_client import NojiClient

        return NojiClient(c.get("settings"))

    container.register("noji_client", create_noji_client)

    def create_card_service(c):
        from ..services.card_service import CardService

        return CardService(c.get("noji_client"), c.get("settings"))

    container.register("cards", create_card_service)

    def create_note_service(c):
        from ..services.note_service import NoteService

        return NoteService(c.get("noji_client"), c.get("settings"))

    container.register("notes", create_note_service)

    # ========================================================================
    # Telegram delivery
    # ========================================================================

    def create_delivery(c):
        from ..bot.bot import get_bot
        from ..services.delivery_service import TelegramDelivery

        return TelegramDelivery(get_bot().bot, c.get("settings").telegram_chat_id)

    container.register("delivery", create_delivery)

    def create_card_scheduler(c):
        from ..services.card_scheduler import CardScheduler

        return CardScheduler(c.get("cards"), c.get("delivery"), c.get("settings"))

    container.register("card_scheduler", create_card_scheduler)

    logger.info("Services registered")


def get_service(name: str) -> Any:
    """Get a registered service by name."""
    return get_container().get(name)
