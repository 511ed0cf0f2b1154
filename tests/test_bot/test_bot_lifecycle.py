"""Tests for the Telegram application wrapper."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from noji_srs.bot import bot as bot_module
from noji_srs.bot.bot import TelegramBot, shutdown_bot


class TestTelegramBot:
    def test_missing_token_raises(self):
        with patch("noji_srs.bot.bot.get_settings") as get_settings:
            get_settings.return_value.telegram_bot_token = ""
            with pytest.raises(ValueError, match="token is required"):
                TelegramBot()

    def test_builds_application_with_job_queue(self):
        bot = TelegramBot("123456:ABC-DEF")

        assert bot.application.job_queue is not None
        assert bot.bot is bot.application.bot

    @pytest.mark.asyncio
    async def test_initialize_starts_application(self):
        bot = TelegramBot("123456:ABC-DEF")
        bot.application = MagicMock()
        bot.application.initialize = AsyncMock()
        bot.application.start = AsyncMock()

        await bot.initialize()

        bot.application.initialize.assert_awaited_once()
        bot.application.start.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_shutdown_skips_stop_when_not_running(self):
        bot = TelegramBot("123456:ABC-DEF")
        bot.application = MagicMock()
        bot.application.running = False
        bot.application.stop = AsyncMock()
        bot.application.shutdown = AsyncMock()

        await bot.shutdown()

        bot.application.stop.assert_not_awaited()
        bot.application.shutdown.assert_awaited_once()


class TestModuleLifecycle:
    @pytest.mark.asyncio
    async def test_shutdown_bot_without_instance(self, monkeypatch):
        monkeypatch.setattr(bot_module, "_bot_instance", None)
        await shutdown_bot()

    @pytest.mark.asyncio
    async def test_shutdown_bot_clears_instance(self, monkeypatch):
        instance = MagicMock()
        instance.shutdown = AsyncMock()
        monkeypatch.setattr(bot_module, "_bot_instance", instance)

        await shutdown_bot()

        instance.shutdown.assert_awaited_once()
        assert bot_module._bot_instance is None
