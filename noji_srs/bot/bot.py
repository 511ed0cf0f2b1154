import logging
from typing import Optional

from telegram.ext import Application

from ..core.config import get_settings

logger = logging.getLogger(__name__)


class TelegramBot:
    """Telegram bot application wrapper.

    The service only sends messages; the Application is kept for its
    JobQueue, which drives the card scheduler.
    """

    def __init__(self, token: Optional[str] = None):
        self.token = token or get_settings().telegram_bot_token
        if not self.token:
            raise ValueError("Telegram bot token is required")

        self.application: Optional[Application] = None
        self._setup_application()

    def _setup_application(self) -> None:
        """Setup the telegram application"""
        self.application = Application.builder().token(self.token).build()
        logger.info("Telegram bot application configured")

    @property
    def bot(self):
        return self.application.bot

    async def initialize(self) -> None:
        """Initialize and start the bot application (starts the JobQueue)"""
        try:
            await self.application.initialize()
            await self.application.start()
            logger.info("Bot application initialized")
        except Exception as e:
            logger.error(f"Error initializing bot: {e}")
            raise

    async def shutdown(self) -> None:
        """Stop and shutdown the bot application"""
        try:
            if self.application.running:
                await self.application.stop()
            await self.application.shutdown()
            logger.info("Bot application shutdown")
        except Exception as e:
            logger.error(f"Error shutting down bot: {e}")


# Global bot instance
_bot_instance: Optional[TelegramBot] = None


def get_bot() -> TelegramBot:
    """Get the global bot instance"""
    global _bot_instance
    if _bot_instance is None:
        _bot_instance = TelegramBot()
    return _bot_instance


async def initialize_bot() -> TelegramBot:
    """Initialize and return the bot instance"""
    bot = get_bot()
    await bot.initialize()
    return bot


async def shutdown_bot() -> None:
    """Shutdown the global bot instance"""
    global _bot_instance
    if _bot_instance:
        await _bot_instance.shutdown()
        _bot_instance = None
