"""Manual control surface: card cache introspection, invalidation and sends."""

import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, status

from ..core.services import get_service
from ..domain.errors import DomainError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["cards"])


@router.get("/cache")
async def cache_info() -> Dict[str, Any]:
    """Cached flag, expiry and card count."""
    return get_service("cards").get_cache_info().to_dict()


@router.post("/cache/clear")
async def clear_cache() -> Dict[str, str]:
    get_service("cards").clear_cache()
    return {"message": "Cache cleared successfully"}


@router.post("/cache/refresh")
async def refresh_cache() -> Dict[str, Any]:
    """Clear the cache and fetch fresh cards from Noji."""
    try:
        count = await get_service("cards").refresh_cache()
    except DomainError as e:
        logger.error(f"Cache refresh failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to fetch cards from Noji: {e}",
        )
    return {"message": "Cache refreshed", "count": count}


@router.post("/send")
async def send_card_now() -> Dict[str, Any]:
    """Send a card immediately, bypassing the window and probability gates."""
    sent = await get_service("card_scheduler").tick(force=True)
    message = "Card sent successfully" if sent else "No card sent"
    return {"message": message, "sent": sent}
