"""aiogram routing: every text message and browse callback goes to the controller."""

import logging
from typing import TYPE_CHECKING

from aiogram import F, Router, types
from aiogram.exceptions import TelegramAPIError

from bookswap.bot.context import ChatUser
from bookswap.bot.keyboards.inline import BrowseCallback

if TYPE_CHECKING:
    from bookswap.bot.controller import ConversationController

logger = logging.getLogger(__name__)


def _chat_user(tg_user: types.User) -> ChatUser:
    return ChatUser(
        id=tg_user.id,
        first_name=tg_user.first_name,
        last_name=tg_user.last_name,
        username=tg_user.username,
    )


def create_router(controller: "ConversationController") -> Router:
    router = Router(name="bookswap")

    @router.message(F.chat.type == "private", F.text)
    async def on_text(message: types.Message) -> None:
        try:
            await controller.handle_text(_chat_user(message.from_user), message.text)
        except Exception as e:
            logger.exception(f"Unhandled error for message from {message.from_user.id}: {e}")

    @router.callback_query(BrowseCallback.filter())
    async def on_browse_callback(callback: types.CallbackQuery, callback_data: BrowseCallback) -> None:
        # Stop the button spinner first; the reply comes as a new message
        try:
            await callback.answer()
        except TelegramAPIError as e:
            logger.warning(f"Could not answer callback from {callback.from_user.id}: {e}")
        try:
            await controller.handle_callback(
                _chat_user(callback.from_user), callback_data.action, callback_data.candidate_id
            )
        except Exception as e:
            logger.exception(f"Unhandled error for callback from {callback.from_user.id}: {e}")

    return router


def register_handlers(dp, controller: "ConversationController") -> None:
    """Attach the bot's router to a dispatcher."""
    dp.include_router(create_router(controller))
    logger.info("Handlers registered")
