"""Shared pytest fixtures for BookSwap tests."""
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from aiogram.fsm.storage.memory import MemoryStorage
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from bookswap.bot.context import BotContext, ChatUser
from bookswap.bot.controller import ConversationController
from bookswap.bot.session import SessionStore
from bookswap.core.config import Settings
from bookswap.db import get_session_factory, init_models
from bookswap.db.models import UserStatus
from bookswap.db.repositories import user_repo

BOT_ID = 123


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_pool(engine):
    return get_session_factory(engine)


@pytest_asyncio.fixture
async def db(session_pool):
    async with session_pool() as session:
        yield session


@pytest.fixture
def settings():
    return Settings(BOT_TOKEN=f"{BOT_ID}:test-token")


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def sessions(storage):
    return SessionStore(storage, BOT_ID)


@pytest.fixture
def messenger():
    return AsyncMock()


@pytest.fixture
def notifier():
    notifier = AsyncMock()
    notifier.send_direct.return_value = True
    return notifier


@pytest.fixture
def ctx(session_pool, messenger, notifier, settings):
    return BotContext(session_pool=session_pool, messenger=messenger, notifier=notifier, settings=settings)


@pytest.fixture
def controller(ctx, sessions):
    return ConversationController(ctx, sessions)


@pytest.fixture
def create_user(session_pool):
    """Factory for registered users with a given number of books."""

    async def _create(telegram_id, books=1, status=UserStatus.ACTIVE, username=None, language="en"):
        async with session_pool() as session:
            user, _ = await user_repo.get_or_create_user(session, {
                "id": telegram_id,
                "first_name": f"Reader{telegram_id}",
                "username": username,
                "language": language,
            })
            for i in range(books):
                await user_repo.add_book(session, user, f"Book {i + 1}", f"Author {i + 1}", "good")
            if status != UserStatus.ACTIVE:
                user.status = status.value
                await session.commit()
            return user

    return _create


@pytest.fixture
def load_user(session_pool):
    async def _load(telegram_id):
        async with session_pool() as session:
            return await user_repo.get_by_telegram_id(session, telegram_id)

    return _load


@pytest.fixture
def send(controller):
    """Send a text message to the controller as the given user."""

    async def _send(user_id, text):
        await controller.handle_text(ChatUser(id=user_id, first_name=f"Reader{user_id}"), text)

    return _send


@pytest.fixture
def sent_texts(messenger):
    """Texts passed to messenger.reply, optionally only those for one user."""

    def _texts(user_id=None):
        return [
            call.args[1]
            for call in messenger.reply.await_args_list
            if user_id is None or call.args[0] == user_id
        ]

    return _texts


@pytest.fixture
def last_markup(messenger):
    def _markup():
        return messenger.reply.await_args_list[-1].args[2]

    return _markup
