"""
Application lifespan management.

Handles startup and shutdown of all subsystems:
- Configuration validation
- Service container setup
- Telegram bot initialization (its JobQueue drives the card scheduler)
- Card scheduler registration
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .api.health import set_start_time
from .bot.bot import get_bot, initialize_bot, shutdown_bot
from .core.config import get_settings
from .core.config_validator import log_config_summary, validate_config
from .core.container import get_container
from .core.services import get_service, setup_services
from .services.card_scheduler import setup_card_scheduler
from .services.scheduler import RuntimeScheduler
from .utils.retry import async_retry

logger = logging.getLogger(__name__)

# Track if bot lifespan has fully completed
_bot_fully_initialized = False


def is_bot_initialized() -> bool:
    """Check if bot lifespan startup completed."""
    return _bot_fully_initialized


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global _bot_fully_initialized
    logger.info("🚀 English SRS starting up...")
    set_start_time()

    # Validate configuration before anything else
    settings = get_settings()
    config_errors = validate_config(settings)
    if config_errors:
        for err in config_errors:
            logger.error(f"Config validation error: {err}")
        logger.critical(
            "Aborting startup due to %d configuration error(s)", len(config_errors)
        )
        sys.exit(1)
    log_config_summary(settings)

    # Register all services in the DI container
    try:
        setup_services()
        logger.info("✅ Service container initialized")
    except Exception as e:
        logger.error(f"❌ Service container setup failed: {e}")
        raise

    @async_retry(
        max_attempts=3, base_delay=2.0, exponential_base=2.0, exceptions=(Exception,)
    )
    async def _initialize_bot_with_retry():
        await initialize_bot()
        logger.info("✅ Telegram bot initialized")

    scheduler_backend: Optional[RuntimeScheduler] = None
    try:
        await _initialize_bot_with_retry()
        _bot_fully_initialized = True
    except Exception as e:
        logger.error(
            f"❌ All bot initialization attempts failed - running in degraded mode: {e}"
        )

    if _bot_fully_initialized:
        scheduler_backend = setup_card_scheduler(
            get_bot().application, get_service("card_scheduler")
        )
    else:
        logger.warning("⚠️ Card scheduler not started - bot unavailable")

    yield

    # Cleanup
    logger.info("🛑 English SRS shutting down...")
    _bot_fully_initialized = False
    if scheduler_backend is not None:
        await scheduler_backend.stop()
    await shutdown_bot()

    client = get_container().peek("noji_client")
    if client is not None:
        await client.aclose()
    logger.info("✅ Shutdown complete")
