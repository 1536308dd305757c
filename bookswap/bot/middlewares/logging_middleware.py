from typing import Any, Awaitable, Callable, Dict

from aiogram import BaseMiddleware
from aiogram.types import Update
from loguru import logger

from bookswap.bot.session import SessionStore


class StateLoggingMiddleware(BaseMiddleware):
    """Logs each update together with the sender's conversation state."""

    def __init__(self, sessions: SessionStore):
        super().__init__()
        self.sessions = sessions

    async def __call__(
        self,
        handler: Callable[[Update, Dict[str, Any]], Awaitable[Any]],
        event: Update,
        data: Dict[str, Any]
    ) -> Any:
        if event.callback_query:
            user_id = event.callback_query.from_user.id
            state = await self._state_of(user_id)
            logger.info(f"CALLBACK: User {user_id} | Data '{event.callback_query.data}' | State '{state}'")
        elif event.message and event.message.from_user:
            user_id = event.message.from_user.id
            message_text = event.message.text or "[No text]"
            shortened_text = message_text[:30] + ("..." if len(message_text) > 30 else "")
            state = await self._state_of(user_id)
            logger.info(f"MESSAGE: User {user_id} | Text '{shortened_text}' | State '{state}'")

        try:
            return await handler(event, data)
        except Exception as e:
            logger.error(f"Error processing update {event.update_id}: {e}")
            raise

    async def _state_of(self, user_id: int) -> str:
        try:
            return (await self.sessions.get_state(user_id)).value
        except Exception as e:
            # Logging must not block the update
            logger.warning(f"Could not read state for user {user_id}: {e}")
            return "unknown"
