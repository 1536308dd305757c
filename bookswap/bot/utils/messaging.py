"""Outbound message delivery over the Telegram Bot API."""

from typing import Protocol

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError
from aiogram.types import InlineKeyboardMarkup, ReplyKeyboardMarkup, ReplyKeyboardRemove
from loguru import logger

ReplyMarkup = InlineKeyboardMarkup | ReplyKeyboardMarkup | ReplyKeyboardRemove


class Messenger(Protocol):
    async def reply(self, user_id: int, text: str, reply_markup: ReplyMarkup | None = None) -> None: ...


class Notifier(Protocol):
    async def send_direct(self, user_id: int, text: str) -> bool: ...


class BotMessenger:
    """Sends replies and direct notifications through an aiogram Bot."""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def reply(self, user_id: int, text: str, reply_markup: ReplyMarkup | None = None) -> None:
        await self.bot.send_message(chat_id=user_id, text=text, reply_markup=reply_markup)

    async def send_direct(self, user_id: int, text: str) -> bool:
        """Send a message the user did not ask for. Never raises on delivery failure."""
        try:
            await self.bot.send_message(chat_id=user_id, text=text)
            logger.debug(f"Direct message delivered to {user_id}")
            return True
        except TelegramAPIError as e:
            # Blocked bot, deleted account, chat not found...
            logger.warning(f"Failed to deliver direct message to {user_id}: {e}")
            return False
