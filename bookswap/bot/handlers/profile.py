"""
Profile view and book management.

Books are picked by the position shown on their delete button, but the
confirmation step works on the book id captured at pick time and re-checks
ownership before deleting, so a list changed from another device can never
make the wrong book disappear.
"""

from loguru import logger

from bookswap.bot.actions import DialogInput, parse_delete_selection, resolve_dialog_input
from bookswap.bot.context import Turn
from bookswap.bot.keyboards.reply import (
    get_confirm_delete_keyboard,
    get_main_keyboard,
    get_manage_books_keyboard,
    get_profile_menu_keyboard,
)
from bookswap.bot.states import PROFILE_STATES, ConversationState
from bookswap.bot.utils.formatting import format_books, format_profile, format_status
from bookswap.db.models import User, UserStatus
from bookswap.db.repositories import user_repo


async def _load_user(turn: Turn) -> User | None:
    user = await user_repo.get_by_telegram_id(turn.db, turn.user.id)
    if user is None:
        logger.warning(f"Profile requested by unregistered user {turn.user.id}")
        turn.session.reset()
        turn.reply(turn.t("error_not_registered"), get_main_keyboard(turn.lang))
    return user


async def show_profile(turn: Turn) -> None:
    user = await _load_user(turn)
    if user is None:
        return
    turn.session.enter(ConversationState.PROFILE_MENU)
    turn.reply(format_profile(user, turn.lang, turn.max_books), get_profile_menu_keyboard(turn.lang))


async def toggle_status(turn: Turn) -> None:
    user = await _load_user(turn)
    if user is None:
        return

    status = await user_repo.toggle_status(turn.db, user)
    logger.info(f"User {turn.user.id} is now {status}")
    emoji, label = format_status(user, turn.lang)
    visibility = "status_visible" if status == UserStatus.ACTIVE.value else "status_hidden"
    text = f"{turn.t('status_updated', emoji, label)}\n{turn.t(visibility)}"

    if turn.previous_state in PROFILE_STATES:
        turn.reply(text)
        await show_profile(turn)
    else:
        turn.reply(text, get_main_keyboard(turn.lang))


async def process_profile_menu(turn: Turn) -> None:
    if resolve_dialog_input(turn.text) == DialogInput.MANAGE_BOOKS:
        await show_manage_books(turn)
        return
    # Anything else re-renders the menu
    await show_profile(turn)


async def show_manage_books(turn: Turn) -> None:
    user = await _load_user(turn)
    if user is None:
        return

    turn.session.enter(ConversationState.MANAGE_BOOKS)
    parts = [turn.t("book_management")]
    if user.books:
        parts.append(format_books(user.books, turn.lang))
        parts.append(turn.t("book_select_remove"))
    else:
        parts.append(turn.t("profile_no_books"))
    turn.reply("\n\n".join(parts), get_manage_books_keyboard(user, turn.lang, turn.max_books))


async def process_manage_books(turn: Turn) -> None:
    if resolve_dialog_input(turn.text) == DialogInput.BACK_TO_PROFILE:
        await show_profile(turn)
        return

    position = parse_delete_selection(turn.text)
    if position is None:
        await show_manage_books(turn)
        return

    user = await _load_user(turn)
    if user is None:
        return
    if not 1 <= position <= len(user.books):
        logger.warning(f"User {turn.user.id} picked book {position} of {len(user.books)}")
        turn.reply(turn.t("error_book_not_found"))
        await show_manage_books(turn)
        return

    book = user.books[position - 1]
    turn.session.enter(
        ConversationState.CONFIRM_DELETE_BOOK,
        temp_data={"book_id": book.id, "position": position},
    )
    turn.reply(turn.t("book_deletion_confirm", book.title, book.author), get_confirm_delete_keyboard(turn.lang))


async def process_confirm_delete(turn: Turn) -> None:
    choice = resolve_dialog_input(turn.text)

    if choice == DialogInput.BACK_TO_PROFILE:
        await show_profile(turn)
        return
    if choice in (DialogInput.REJECT_DELETE, DialogInput.NO):
        await show_manage_books(turn)
        return
    if choice not in (DialogInput.CONFIRM_DELETE, DialogInput.YES):
        turn.reply(turn.t("error_invalid_input"), get_confirm_delete_keyboard(turn.lang))
        return

    book_id = turn.session.temp_data.get("book_id")
    user = await _load_user(turn)
    if user is None:
        return

    deleted = await user_repo.delete_book(turn.db, user, book_id) if book_id is not None else None
    if deleted is None:
        turn.reply(turn.t("error_book_not_found"))
    else:
        turn.reply(turn.t("book_deleted", deleted.title))
    await show_manage_books(turn)
