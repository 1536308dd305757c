"""
Conversation controller.

Every inbound text or callback goes through ``ConversationController``: the
user's session is loaded, a global command (if the text is one) or the step
handler of the current state runs, replies are sent and the session is saved.
Events from the same user are processed one at a time in arrival order.
"""

import asyncio
import weakref
from functools import partial
from typing import Awaitable, Callable

from loguru import logger

from bookswap.bot.actions import MenuAction, resolve_menu_action
from bookswap.bot.context import BotContext, ChatUser, Reply, Turn
from bookswap.bot.handlers import add_book, browsing, language, matches, profile, registration, start
from bookswap.bot.handlers import help as help_handler
from bookswap.bot.keyboards.reply import get_main_keyboard
from bookswap.bot.session import SessionStore
from bookswap.bot.states import ConversationState
from bookswap.core.localization import t
from bookswap.db.models import DecisionAction
from bookswap.db.repositories import user_repo

Handler = Callable[[Turn], Awaitable[None]]

MENU_HANDLERS: dict[MenuAction, Handler] = {
    MenuAction.START: start.cmd_start,
    MenuAction.MAIN_MENU: start.show_main_menu,
    MenuAction.BROWSE: browsing.start_browsing,
    MenuAction.PROFILE: profile.show_profile,
    MenuAction.TOGGLE_STATUS: profile.toggle_status,
    MenuAction.ADD_BOOK: add_book.start_add_book,
    MenuAction.MATCHES: matches.show_matches,
    MenuAction.HELP: help_handler.show_help,
    MenuAction.LANGUAGE: language.start_language_selection,
}

# IDLE has no step handler: free text outside a dialog is ignored
STATE_HANDLERS: dict[ConversationState, Handler] = {
    ConversationState.INITIAL_LANGUAGE_SELECTION: language.process_initial_language,
    ConversationState.LANGUAGE_SELECTION: language.process_language,
    ConversationState.REGISTRATION: registration.process_registration,
    ConversationState.ADDING_BOOK: add_book.process_add_book,
    ConversationState.PROFILE_MENU: profile.process_profile_menu,
    ConversationState.MANAGE_BOOKS: profile.process_manage_books,
    ConversationState.CONFIRM_DELETE_BOOK: profile.process_confirm_delete,
    ConversationState.BROWSING: browsing.process_browsing,
}


class ConversationController:
    def __init__(self, ctx: BotContext, sessions: SessionStore):
        self.ctx = ctx
        self.sessions = sessions
        self._locks: weakref.WeakValueDictionary[int, asyncio.Lock] = weakref.WeakValueDictionary()

    def _lock_for(self, user_id: int) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    async def handle_text(self, user: ChatUser, text: str | None) -> None:
        async with self._lock_for(user.id):
            await self._process(user, text or "", self._dispatch_text)

    async def handle_callback(self, user: ChatUser, action: DecisionAction, candidate_id: int) -> None:
        async with self._lock_for(user.id):
            handler = partial(browsing.process_callback, action=action, candidate_id=candidate_id)
            await self._process(user, "", handler)

    async def _dispatch_text(self, turn: Turn) -> None:
        action = resolve_menu_action(turn.text)
        if action is not None:
            logger.info(f"User {turn.user.id}: global command {action.value} from state {turn.session.state.value}")
            turn.session.reset()
            await MENU_HANDLERS[action](turn)
            return

        handler = STATE_HANDLERS.get(turn.session.state)
        if handler is None:
            logger.debug(f"User {turn.user.id}: no handler for state {turn.session.state.value}, ignoring")
            return
        await handler(turn)

    async def _process(self, user: ChatUser, text: str, handler: Handler) -> None:
        session = await self.sessions.load(user.id)

        async with self.ctx.session_pool() as db:
            if session.language is None:
                # Session was lost or never existed; recover the language from the profile
                record = await user_repo.get_by_telegram_id(db, user.id)
                if record is not None:
                    session.language = record.language

            turn = Turn(
                user=user,
                text=text,
                session=session,
                db=db,
                ctx=self.ctx,
                previous=session.model_copy(deep=True),
            )

            await self._run_step(turn, handler)
            await self._flush(turn)

            # Second phase: runs only after the first batch is delivered and saved
            continuation = turn.continuation
            if continuation is not None:
                turn.continuation = None
                await self._run_step(turn, continuation)
                await self._flush(turn)

    async def _run_step(self, turn: Turn, handler: Handler) -> None:
        try:
            await handler(turn)
        except Exception:
            logger.exception(f"Error handling input from user {turn.user.id} in state {turn.session.state.value}")
            await turn.db.rollback()
            turn.session.reset()
            turn.continuation = None
            lang = turn.lang
            turn.replies = [Reply(t("error_generic", lang), get_main_keyboard(lang))]

    async def _flush(self, turn: Turn) -> None:
        replies, turn.replies = turn.replies, []
        for reply in replies:
            try:
                await self.ctx.messenger.reply(turn.user.id, reply.text, reply.reply_markup)
            except Exception as e:
                logger.error(f"Failed to send reply to user {turn.user.id}: {e}")
                break
        await self.sessions.save(turn.user.id, turn.session)
