"""
Delivery transport - sends formatted card messages to the Telegram chat.
"""

import logging
from typing import Union

from telegram import Bot
from telegram.constants import ParseMode
from telegram.error import TelegramError

from ..domain.errors import DeliveryError

logger = logging.getLogger(__name__)


class TelegramDelivery:
    """Sends HTML messages to a single chat."""

    def __init__(self, bot: Bot, chat_id: Union[int, str]) -> None:
        self._bot = bot
        self.chat_id = chat_id

    async def send(self, text: str) -> None:
        """Send ``text`` as HTML.

        Raises:
            DeliveryError: If Telegram rejects the message or is unreachable.
        """
        try:
            await self._bot.send_message(
                chat_id=self.chat_id,
                text=text,
                parse_mode=ParseMode.HTML,
            )
        except TelegramError as e:
            raise DeliveryError(f"Failed to send message to {self.chat_id}: {e}") from e
        logger.debug("Message delivered to chat %s", self.chat_id)
