"""Tests for session persistence in FSM storage."""
from datetime import datetime, timedelta, timezone

from aiogram.fsm.storage.base import StorageKey

from bookswap.bot.states import BrowsingPointer, ConversationState, Session
from conftest import BOT_ID


class TestSessionStore:

    async def test_missing_session_is_idle(self, sessions):
        session = await sessions.load(1)
        assert session.state == ConversationState.IDLE
        assert session.step == 0
        assert session.temp_data == {}
        assert session.browsing.current_candidate_id is None

    async def test_round_trip_keeps_dialog_progress(self, sessions):
        session = Session(language="ru")
        session.enter(ConversationState.ADDING_BOOK, step=2, temp_data={"title": "Dune"})
        session.browsing.point_to(77)
        await sessions.save(1, session)

        loaded = await sessions.load(1)
        assert loaded.state == ConversationState.ADDING_BOOK
        assert loaded.step == 2
        assert loaded.temp_data == {"title": "Dune"}
        assert loaded.language == "ru"
        assert loaded.browsing.current_candidate_id == 77
        assert loaded.browsing.start_time is not None

    async def test_evicted_session_loads_as_idle(self, sessions):
        session = Session()
        session.enter(ConversationState.REGISTRATION, step=3, temp_data={"title": "Dune", "author": "Herbert"})
        await sessions.save(1, session)
        await sessions.clear(1)

        loaded = await sessions.load(1)
        assert loaded.state == ConversationState.IDLE
        assert loaded.temp_data == {}

    async def test_corrupted_session_loads_as_idle(self, sessions, storage):
        key = StorageKey(bot_id=BOT_ID, chat_id=1, user_id=1)
        await storage.set_state(key, "no_such_state")
        await storage.set_data(key, {"session": {"step": "not a number"}})

        loaded = await sessions.load(1)
        assert loaded.state == ConversationState.IDLE

    async def test_get_state(self, sessions):
        session = Session()
        session.enter(ConversationState.BROWSING)
        await sessions.save(5, session)
        assert await sessions.get_state(5) == ConversationState.BROWSING
        assert await sessions.get_state(6) == ConversationState.IDLE


class TestSessionModel:

    def test_reset_keeps_language(self):
        session = Session(language="ru")
        session.enter(ConversationState.BROWSING, step=1, temp_data={"x": 1})
        session.browsing.point_to(9)

        session.reset()

        assert session.state == ConversationState.IDLE
        assert session.step == 0
        assert session.temp_data == {}
        assert session.browsing.current_candidate_id is None
        assert session.language == "ru"

    def test_browsing_pointer_expiry(self):
        pointer = BrowsingPointer()
        assert pointer.is_expired(300)

        pointer.point_to(1)
        assert not pointer.is_expired(300)
        later = pointer.start_time + timedelta(seconds=301)
        assert pointer.is_expired(300, now=later)

    def test_pointer_expiry_uses_aware_time(self):
        pointer = BrowsingPointer(current_candidate_id=1, start_time=datetime.now(timezone.utc) - timedelta(minutes=6))
        assert pointer.is_expired(300)
