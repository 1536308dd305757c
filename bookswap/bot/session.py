"""
Session persistence on top of aiogram FSM storage.

The storage is volatile (MemoryStorage or RedisStorage with a TTL). A session
that was evicted or cannot be decoded loads as a fresh idle session, which is
the same as the user having cancelled whatever they were doing.
"""

from aiogram.fsm.storage.base import BaseStorage, StorageKey
from loguru import logger
from pydantic import ValidationError

from bookswap.bot.states import ConversationState, Session

SESSION_DATA_KEY = "session"


class SessionStore:
    """Load and save conversation sessions keyed by Telegram user id."""

    def __init__(self, storage: BaseStorage, bot_id: int):
        self.storage = storage
        self.bot_id = bot_id

    def _key(self, user_id: int) -> StorageKey:
        # Private chats only: the chat id equals the user id
        return StorageKey(bot_id=self.bot_id, chat_id=user_id, user_id=user_id)

    async def load(self, user_id: int) -> Session:
        key = self._key(user_id)
        state = await self.storage.get_state(key)
        data = await self.storage.get_data(key)
        raw = data.get(SESSION_DATA_KEY)

        if state is None or raw is None:
            return Session(language=raw.get("language") if isinstance(raw, dict) else None)

        try:
            session = Session.model_validate({**raw, "state": state})
        except ValidationError as e:
            logger.warning(f"Discarding unreadable session for user {user_id}: {e}")
            return Session()
        return session

    async def save(self, user_id: int, session: Session) -> None:
        key = self._key(user_id)
        payload = session.model_dump(mode="json", exclude={"state"})
        await self.storage.set_state(key, session.state.value)
        await self.storage.set_data(key, {SESSION_DATA_KEY: payload})

    async def clear(self, user_id: int) -> None:
        key = self._key(user_id)
        await self.storage.set_state(key, None)
        await self.storage.set_data(key, {})

    async def get_state(self, user_id: int) -> ConversationState:
        state = await self.storage.get_state(self._key(user_id))
        try:
            return ConversationState(state)
        except ValueError:
            return ConversationState.IDLE
