"""
Root and health endpoints.

Returns structured health info: uptime, version, bot status, card cache
and last delivery. Lightweight and requires no authentication.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter

from ..core.container import get_container

logger = logging.getLogger(__name__)

SERVICE_NAME = "English SRS"

# Start time for uptime calculation
_start_time: float = time.monotonic()


def set_start_time() -> None:
    """Reset the start time (called during app startup)."""
    global _start_time
    _start_time = time.monotonic()


def get_uptime_seconds() -> float:
    """Return seconds since the process started."""
    return time.monotonic() - _start_time


def _get_version() -> str:
    try:
        from ..version import __version__

        return __version__
    except Exception:
        return "unknown"


def _is_bot_initialized() -> bool:
    from ..lifecycle import is_bot_initialized

    return is_bot_initialized()


def _scheduler_summary() -> Dict[str, Any]:
    """Cache and delivery state, without creating services as a side effect."""
    container = get_container()
    summary: Dict[str, Any] = {}

    cards = container.peek("cards")
    if cards is not None:
        summary["cache"] = cards.get_cache_info().to_dict()

    scheduler = container.peek("card_scheduler")
    if scheduler is not None:
        last = scheduler.state.last_delivered_at
        summary["last_delivered_at"] = last.isoformat() if last else None

    return summary


def create_health_router() -> APIRouter:
    """Create and return the root/health router."""
    router = APIRouter()

    @router.get("/")
    async def root() -> Dict[str, str]:
        """Root endpoint for health checks and API info"""
        return {
            "service": SERVICE_NAME,
            "status": "running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @router.get("/health")
    async def health_endpoint() -> Dict[str, Any]:
        """Lightweight health check endpoint (no auth required)."""
        bot_initialized = _is_bot_initialized()
        return {
            "status": "healthy" if bot_initialized else "degraded",
            "service": SERVICE_NAME,
            "version": _get_version(),
            "uptime_seconds": round(get_uptime_seconds(), 2),
            "bot_initialized": bot_initialized,
            **_scheduler_summary(),
        }

    return router
