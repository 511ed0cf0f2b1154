"""
Startup configuration validation and redacted summary logging.

Called early in the FastAPI lifespan to fail fast on misconfiguration.
"""

import logging
import re
from typing import List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .config import Settings

logger = logging.getLogger(__name__)

# Secrets that must be non-empty for the service to function.
_REQUIRED_SECRETS = [
    ("noji_email", "NOJI_EMAIL"),
    ("noji_password", "NOJI_PASSWORD"),
    ("telegram_bot_token", "TELEGRAM_BOT_TOKEN"),
    ("telegram_chat_id", "TELEGRAM_CHAT_ID"),
]

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_config(settings: Settings) -> List[str]:
    """
    Validate application configuration and return a list of error strings.

    An empty list means the configuration is valid.
    """
    errors: List[str] = []

    # -- Required secrets --------------------------------------------------
    for attr, env_name in _REQUIRED_SECRETS:
        value = getattr(settings, attr, "")
        if not value or not value.strip():
            errors.append(f"{env_name} is required but missing or empty")

    if settings.noji_email and not _EMAIL_RE.match(settings.noji_email.strip()):
        errors.append(f"NOJI_EMAIL format is invalid: '{settings.noji_email}'")

    # -- Decks -------------------------------------------------------------
    if not settings.deck_ids:
        errors.append("NOJI_DECK_ID must contain at least one deck id")

    # -- Schedule ----------------------------------------------------------
    if not 0.0 <= settings.send_probability <= 1.0:
        errors.append(
            f"SEND_PROBABILITY must be between 0 and 1, got {settings.send_probability}"
        )

    if not (0 <= settings.work_hour_start < settings.work_hour_end <= 24):
        errors.append(
            "WORK_HOUR_START/WORK_HOUR_END must satisfy 0 <= start < end <= 24, "
            f"got {settings.work_hour_start}-{settings.work_hour_end}"
        )

    try:
        weekdays = settings.weekdays
    except ValueError:
        errors.append(f"WORK_WEEKDAYS is invalid: '{settings.work_weekdays}'")
    else:
        if not weekdays or any(d < 1 or d > 7 for d in weekdays):
            errors.append(
                f"WORK_WEEKDAYS must list ISO weekdays 1-7: '{settings.work_weekdays}'"
            )

    if settings.max_gap_minutes <= 0:
        errors.append("MAX_GAP_MINUTES must be positive")

    try:
        ZoneInfo(settings.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        errors.append(f"TIMEZONE is not a known timezone: '{settings.timezone}'")

    return errors


def _redact(secret: str) -> str:
    """Return first 4 characters followed by '***', or '<empty>' if blank."""
    if not secret:
        return "<empty>"
    return secret[:4] + "***"


def log_config_summary(settings: Settings) -> None:
    """
    Log an INFO-level summary of loaded configuration with secrets redacted.
    """
    summary_lines = [
        f"environment={settings.environment}",
        f"decks={len(settings.deck_ids)}",
        f"window={settings.work_weekdays}@{settings.work_hour_start}-{settings.work_hour_end}",
        f"timezone={settings.timezone}",
        f"probability={settings.send_probability}",
        f"max_gap_minutes={settings.max_gap_minutes}",
        f"noji_email={_redact(settings.noji_email)}",
        f"bot_token={_redact(settings.telegram_bot_token)}",
        f"llm_model={settings.llm_model}",
    ]

    if settings.gemini_api_key:
        summary_lines.append(f"gemini_key={_redact(settings.gemini_api_key)}")

    logger.info("Config loaded: %s", " | ".join(summary_lines))
