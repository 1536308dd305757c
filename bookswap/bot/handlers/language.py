"""Language selection, both during onboarding and from the main menu."""

from loguru import logger

from bookswap.bot.actions import DialogInput, resolve_dialog_input
from bookswap.bot.context import Turn
from bookswap.bot.keyboards.reply import get_back_keyboard, get_language_keyboard, get_main_keyboard
from bookswap.bot.states import ConversationState
from bookswap.core.localization import language_code_for
from bookswap.db.repositories import user_repo


async def start_language_selection(turn: Turn) -> None:
    turn.session.enter(ConversationState.LANGUAGE_SELECTION)
    turn.reply(turn.t("language_selection"), get_language_keyboard())


async def _apply_language(turn: Turn) -> bool:
    """Persist the chosen language. Returns False (after re-prompting) on unknown input."""
    code = language_code_for((turn.text or "").strip())
    if code is None:
        turn.reply(turn.t("language_selection"), get_language_keyboard())
        return False

    user = await user_repo.get_by_telegram_id(turn.db, turn.user.id)
    if user is not None:
        await user_repo.set_language(turn.db, user, code)
    else:
        logger.warning(f"Language chosen by unregistered user {turn.user.id}; kept in session only")
    turn.session.language = code
    logger.info(f"User {turn.user.id} switched language to {code}")
    return True


async def process_language(turn: Turn) -> None:
    if resolve_dialog_input(turn.text) in (DialogInput.BACK, DialogInput.CANCEL):
        turn.session.reset()
        turn.reply(turn.t("main_menu"), get_main_keyboard(turn.lang))
        return

    if not await _apply_language(turn):
        return
    turn.session.reset()
    turn.reply(turn.t("language_selected"), get_main_keyboard(turn.lang))


async def process_initial_language(turn: Turn) -> None:
    """Onboarding: once a language is picked, registration starts right away."""
    if resolve_dialog_input(turn.text) in (DialogInput.BACK, DialogInput.CANCEL):
        turn.session.reset()
        turn.reply(turn.t("main_menu"), get_main_keyboard(turn.lang))
        return

    if not await _apply_language(turn):
        return
    turn.session.enter(ConversationState.REGISTRATION, step=1)
    turn.reply(turn.t("language_selected"))
    turn.reply(turn.t("registration_start"), get_back_keyboard(turn.t("cancel_registration")))
