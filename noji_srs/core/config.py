"""
Application configuration using Pydantic Settings.

Centralizes all configuration with environment variable support.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Noji
    noji_email: str = ""
    noji_password: str = ""
    # Comma-separated list of deck ids to draw cards from
    noji_deck_id: str = ""
    noji_vocab_deck_id: Optional[str] = None
    noji_sentence_deck_id: Optional[str] = None
    noji_base_url: str = "https://api-de.noji.io/api"
    noji_web_url: str = "https://noji.io"
    noji_page_size: int = 100
    noji_http_timeout_seconds: float = 30.0

    # Telegram
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""

    # LLM
    gemini_api_key: Optional[str] = None
    llm_model: str = "gemini/gemini-2.5-flash"

    # Server
    port: int = 3000

    # Environment
    environment: str = "development"
    log_level: str = "INFO"

    # Delivery schedule
    scheduler_enabled: bool = True
    timezone: str = "Asia/Saigon"
    work_weekdays: str = "1,2,3,4,5"  # ISO weekdays, Monday=1
    work_hour_start: int = 9
    work_hour_end: int = 18  # exclusive
    send_probability: float = 0.2
    max_gap_minutes: float = 15.0

    # Cache lifetimes
    token_ttl_hours: float = 23.0
    card_cache_ttl_minutes: float = 60.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra env vars

    @property
    def deck_ids(self) -> List[str]:
        """Configured deck ids, trimmed, empties dropped."""
        return [d.strip() for d in self.noji_deck_id.split(",") if d.strip()]

    @property
    def vocab_deck_id(self) -> Optional[str]:
        if self.noji_vocab_deck_id:
            return self.noji_vocab_deck_id
        return self.deck_ids[0] if self.deck_ids else None

    @property
    def sentence_deck_id(self) -> Optional[str]:
        if self.noji_sentence_deck_id:
            return self.noji_sentence_deck_id
        return self.deck_ids[0] if self.deck_ids else None

    @property
    def weekdays(self) -> List[int]:
        """ISO weekday numbers (1-7) on which cards may be sent."""
        return [int(d) for d in self.work_weekdays.split(",") if d.strip()]

    @property
    def max_gap_hours(self) -> float:
        return self.max_gap_minutes / 60.0


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
