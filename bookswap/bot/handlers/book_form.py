"""
Title, author and condition steps shared by registration and add-book.

The partial book lives in ``session.temp_data`` until step 3 succeeds, so a
cancelled or abandoned dialog never leaves a book behind.
"""

from loguru import logger

from bookswap.bot.actions import normalize_condition
from bookswap.bot.context import Turn
from bookswap.bot.keyboards.reply import get_back_keyboard, get_condition_keyboard, get_main_keyboard
from bookswap.core.exceptions import BookLimitError, InvalidBookError, UserNotFoundError
from bookswap.db.models import TEXT_MAX_LENGTH, Book, User
from bookswap.db.repositories import user_repo

TITLE_STEP = 1
AUTHOR_STEP = 2
CONDITION_STEP = 3


async def collect_book(turn: Turn, cancel_key: str, title_prompt_key: str) -> tuple[Book, User] | None:
    """
    Advance the book form by one message.

    Returns the saved book and its owner once the condition is accepted,
    otherwise None with the next prompt (or a re-prompt) queued on the turn.
    """
    session = turn.session
    text = (turn.text or "").strip()
    cancel_keyboard = get_back_keyboard(turn.t(cancel_key))

    if session.step == TITLE_STEP:
        if not _accept_text(turn, text, cancel_keyboard):
            return None
        session.temp_data["title"] = text
        session.step = AUTHOR_STEP
        turn.reply(turn.t("registration_author"), cancel_keyboard)
        return None

    if session.step == AUTHOR_STEP:
        if not _accept_text(turn, text, cancel_keyboard):
            return None
        session.temp_data["author"] = text
        session.step = CONDITION_STEP
        turn.reply(turn.t("registration_condition"), get_condition_keyboard(turn.lang, cancel_key))
        return None

    if session.step == CONDITION_STEP:
        condition = normalize_condition(turn.text, turn.lang)
        if condition is None:
            turn.reply(turn.t("registration_invalid_condition"), get_condition_keyboard(turn.lang, cancel_key))
            return None
        return await _save_book(turn, condition)

    # Step counter out of range, start the form over
    logger.warning(f"User {turn.user.id} in {session.state.value} at unexpected step {session.step}")
    session.step = TITLE_STEP
    session.temp_data = {}
    turn.reply(turn.t(title_prompt_key), cancel_keyboard)
    return None


def _accept_text(turn: Turn, text: str, keyboard) -> bool:
    """Re-prompt the current step for empty or over-long text."""
    if not text:
        turn.reply(turn.t("empty_input"), keyboard)
        return False
    if len(text) > TEXT_MAX_LENGTH:
        turn.reply(turn.t("input_too_long", TEXT_MAX_LENGTH), keyboard)
        return False
    return True


async def _save_book(turn: Turn, condition: str) -> tuple[Book, User] | None:
    data = turn.session.temp_data
    if not data.get("title") or not data.get("author"):
        logger.warning(f"User {turn.user.id} reached the condition step without title/author")
        turn.session.step = TITLE_STEP
        turn.session.temp_data = {}
        turn.reply(turn.t("error_invalid_input"))
        return None

    try:
        user = await user_repo.get_by_telegram_id(turn.db, turn.user.id)
        if user is None:
            raise UserNotFoundError(turn.user.id)
        book = await user_repo.add_book(
            turn.db, user, data["title"], data["author"], condition, max_books=turn.max_books
        )
    except UserNotFoundError as e:
        logger.warning(str(e))
        turn.session.reset()
        turn.reply(turn.t("error_user_not_found"), get_main_keyboard(turn.lang))
        return None
    except BookLimitError as e:
        # The list filled up from another device while this form was open
        logger.warning(str(e))
        turn.session.reset()
        turn.reply(turn.t("book_limit_reached", e.limit), get_main_keyboard(turn.lang))
        return None
    except InvalidBookError as e:
        logger.warning(f"User {turn.user.id} book rejected: {e}")
        turn.session.step = TITLE_STEP
        turn.session.temp_data = {}
        turn.reply(turn.t("error_invalid_input"))
        return None

    turn.session.temp_data = {}
    return book, user
