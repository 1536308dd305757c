from loguru import logger

from bookswap.bot.actions import DialogInput, resolve_dialog_input
from bookswap.bot.context import Turn
from bookswap.bot.handlers.book_form import TITLE_STEP, collect_book
from bookswap.bot.keyboards.reply import get_back_keyboard, get_main_keyboard
from bookswap.bot.states import ConversationState
from bookswap.db.repositories import user_repo


async def start_add_book(turn: Turn) -> None:
    """Open the add-book form, or refuse without touching the session."""
    user = await user_repo.get_by_telegram_id(turn.db, turn.user.id)
    if user is None:
        turn.restore_previous()
        turn.reply(turn.t("error_not_registered"), get_main_keyboard(turn.lang))
        return

    if len(user.books) >= turn.max_books:
        logger.info(f"User {turn.user.id} hit the {turn.max_books} book limit")
        turn.restore_previous()
        markup = get_main_keyboard(turn.lang) if turn.session.state == ConversationState.IDLE else None
        turn.reply(turn.t("book_limit_reached", turn.max_books), markup)
        return

    turn.session.enter(ConversationState.ADDING_BOOK, step=TITLE_STEP)
    turn.reply(turn.t("book_add_title"), get_back_keyboard(turn.t("cancel")))


async def process_add_book(turn: Turn) -> None:
    if resolve_dialog_input(turn.text) == DialogInput.CANCEL:
        turn.session.reset()
        turn.reply(turn.t("book_add_cancelled"), get_main_keyboard(turn.lang))
        return

    saved = await collect_book(turn, cancel_key="cancel", title_prompt_key="book_add_title")
    if saved is None:
        return

    turn.session.reset()
    turn.reply(turn.t("book_add_success"), get_main_keyboard(turn.lang))
