import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI

# Project .env, then .env.local overrides
project_root = Path(__file__).parent.parent
for env_path in (project_root / ".env", project_root / ".env.local"):
    if env_path.exists():
        load_dotenv(env_path, override=True)

from .api import cache, cards  # noqa: E402
from .api.health import create_health_router  # noqa: E402
from .core.config import get_settings  # noqa: E402
from .lifecycle import lifespan  # noqa: E402
from .middleware.error_handler import ErrorHandlerMiddleware  # noqa: E402
from .utils.logging import setup_logging  # noqa: E402
from .version import __version__  # noqa: E402

settings = get_settings()
setup_logging(
    log_level=settings.log_level, log_to_file=settings.environment != "test"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="English SRS",
    description="Sends Noji flashcards to Telegram during working hours",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(ErrorHandlerMiddleware)

app.include_router(create_health_router())
app.include_router(cache.router)
app.include_router(cards.router)


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    logger.info("Server starting on 0.0.0.0:%d", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
