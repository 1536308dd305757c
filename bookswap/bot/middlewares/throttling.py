import time
from collections import deque
from typing import Any, Awaitable, Callable, Dict

from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message, TelegramObject
from loguru import logger

from bookswap.core.localization import t

WINDOW_SECONDS = 60


class ThrottlingMiddleware(BaseMiddleware):
    """
    Rolling per-user rate limit.

    Allows ``limit`` events per user in any 60 second window. Events over the
    limit get a "please wait" answer and never reach the handlers.
    """

    def __init__(self, limit: int = 30, window: float = WINDOW_SECONDS, clock: Callable[[], float] = time.monotonic):
        super().__init__()
        self.limit = limit
        self.window = window
        self.clock = clock
        self._events: dict[int, deque[float]] = {}
        # Users already told to slow down in the current window
        self._warned: set[int] = set()
        self._last_sweep = clock()

    def _sweep(self, now: float) -> None:
        """Forget users with no events left in the window."""
        idle = [
            user_id for user_id, events in self._events.items()
            if not events or now - events[-1] >= self.window
        ]
        for user_id in idle:
            del self._events[user_id]
            self._warned.discard(user_id)
        self._last_sweep = now

    def allow(self, user_id: int) -> bool:
        now = self.clock()
        if now - self._last_sweep >= self.window:
            self._sweep(now)
        events = self._events.setdefault(user_id, deque())
        while events and now - events[0] >= self.window:
            events.popleft()
        if len(events) >= self.limit:
            return False
        events.append(now)
        self._warned.discard(user_id)
        return True

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        user = data.get("event_from_user")
        if user is None or self.allow(user.id):
            return await handler(event, data)

        logger.warning(f"Rate limit hit by user {user.id}")
        text = t("rate_limited", user.language_code)
        if isinstance(event, CallbackQuery):
            await event.answer(text, show_alert=False)
        elif isinstance(event, Message) and user.id not in self._warned:
            self._warned.add(user.id)
            await event.answer(text)
        return None
