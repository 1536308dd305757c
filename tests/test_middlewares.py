"""Tests for the middlewares and the aiogram callback routing."""
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from aiogram.exceptions import TelegramBadRequest
from aiogram.types import CallbackQuery, Message

from bookswap.bot.context import ChatUser
from bookswap.bot.handlers import create_router
from bookswap.bot.keyboards.inline import BrowseCallback
from bookswap.bot.middlewares import StateLoggingMiddleware, ThrottlingMiddleware
from bookswap.core.localization import t
from bookswap.db.models import DecisionAction


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def make_message():
    message = MagicMock(spec=Message)
    message.answer = AsyncMock()
    return message


class TestThrottlingMiddleware:

    async def test_allows_up_to_limit_per_window(self):
        clock = FakeClock()
        middleware = ThrottlingMiddleware(limit=3, clock=clock)
        handler = AsyncMock(return_value="handled")
        data = {"event_from_user": SimpleNamespace(id=1, language_code="en")}

        results = [await middleware(handler, make_message(), data) for _ in range(4)]

        assert results == ["handled", "handled", "handled", None]
        assert handler.await_count == 3

    async def test_window_rolls(self):
        clock = FakeClock()
        middleware = ThrottlingMiddleware(limit=2, clock=clock)

        assert middleware.allow(1)
        clock.now += 30
        assert middleware.allow(1)
        assert not middleware.allow(1)
        clock.now += 31
        # The first event left the window, the second has not
        assert middleware.allow(1)
        assert not middleware.allow(1)

    async def test_limits_are_per_user(self):
        middleware = ThrottlingMiddleware(limit=1, clock=FakeClock())
        assert middleware.allow(1)
        assert middleware.allow(2)
        assert not middleware.allow(1)

    async def test_rejected_message_gets_one_wait_notice(self):
        middleware = ThrottlingMiddleware(limit=1, clock=FakeClock())
        handler = AsyncMock()
        data = {"event_from_user": SimpleNamespace(id=1, language_code="ru")}
        await middleware(handler, make_message(), data)

        rejected = [make_message() for _ in range(3)]
        for message in rejected:
            await middleware(handler, message, data)

        rejected[0].answer.assert_awaited_once_with(t("rate_limited", "ru"))
        rejected[1].answer.assert_not_awaited()
        handler.assert_awaited_once()

    async def test_rejected_callback_is_answered(self):
        middleware = ThrottlingMiddleware(limit=0, clock=FakeClock())
        callback = MagicMock(spec=CallbackQuery)
        callback.answer = AsyncMock()
        handler = AsyncMock()

        await middleware(handler, callback, {"event_from_user": SimpleNamespace(id=1, language_code=None)})

        callback.answer.assert_awaited_once()
        handler.assert_not_awaited()

    async def test_idle_users_are_forgotten(self):
        clock = FakeClock()
        middleware = ThrottlingMiddleware(limit=1, clock=clock)
        for user_id in range(100):
            middleware.allow(user_id)
        assert not middleware.allow(5)

        clock.now += 61
        assert middleware.allow(500)

        assert list(middleware._events) == [500]
        assert middleware._warned == set()

    async def test_events_without_user_pass(self):
        middleware = ThrottlingMiddleware(limit=0)
        handler = AsyncMock(return_value="ok")
        assert await middleware(handler, make_message(), {}) == "ok"


class TestStateLoggingMiddleware:

    async def test_passes_update_through(self, sessions):
        middleware = StateLoggingMiddleware(sessions)
        update = SimpleNamespace(
            update_id=1,
            callback_query=None,
            message=SimpleNamespace(from_user=SimpleNamespace(id=5), text="hello"),
        )
        handler = AsyncMock(return_value="done")

        assert await middleware(handler, update, {}) == "done"
        handler.assert_awaited_once_with(update, {})


class TestBrowseCallbackRouting:

    def make_callback(self, answer_error=None):
        callback = MagicMock(spec=CallbackQuery)
        callback.answer = AsyncMock(side_effect=answer_error)
        callback.from_user = SimpleNamespace(id=1, first_name="Reader1", last_name=None, username=None)
        return callback

    async def route(self, controller, callback):
        router = create_router(controller)
        handler = router.callback_query.handlers[0].callback
        await handler(callback, BrowseCallback(action=DecisionAction.LIKE, candidate_id=2))

    async def test_callback_reaches_controller(self):
        controller = AsyncMock()
        callback = self.make_callback()

        await self.route(controller, callback)

        callback.answer.assert_awaited_once()
        controller.handle_callback.assert_awaited_once_with(
            ChatUser(id=1, first_name="Reader1"), DecisionAction.LIKE, 2
        )

    async def test_failed_answer_still_reaches_controller(self):
        controller = AsyncMock()
        callback = self.make_callback(TelegramBadRequest(method=MagicMock(), message="query is too old"))

        await self.route(controller, callback)

        controller.handle_callback.assert_awaited_once()
