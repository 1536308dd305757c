"""Entry point of the conversation: /start and the main menu."""

import logging

from bookswap.bot.context import Turn
from bookswap.bot.keyboards.reply import get_language_keyboard, get_main_keyboard
from bookswap.bot.states import ConversationState
from bookswap.db.repositories import user_repo

logger = logging.getLogger(__name__)


async def cmd_start(turn: Turn) -> None:
    """Create the user on first contact and ask for a language; greet returning users."""
    user, created = await user_repo.get_or_create_user(turn.db, turn.user.as_dict())

    if created or user.language is None:
        logger.info(f"Onboarding user {turn.user.id} (new: {created})")
        turn.session.enter(ConversationState.INITIAL_LANGUAGE_SELECTION)
        turn.reply(turn.t("welcome_message"), get_language_keyboard())
        return

    turn.session.language = user.language
    turn.reply(turn.t("main_menu"), get_main_keyboard(turn.lang))


async def show_main_menu(turn: Turn) -> None:
    if turn.previous_state == ConversationState.BROWSING:
        turn.reply(turn.t("browse_cancelled"))
    turn.reply(turn.t("main_menu"), get_main_keyboard(turn.lang))
