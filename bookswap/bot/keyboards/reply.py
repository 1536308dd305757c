from aiogram import types
from aiogram.utils.keyboard import ReplyKeyboardBuilder

from bookswap.core.localization import AVAILABLE_LANGUAGES, t
from bookswap.db.models import BookCondition, User


def get_main_keyboard(lang: str | None) -> types.ReplyKeyboardMarkup:
    """Persistent main menu."""
    builder = ReplyKeyboardBuilder()
    builder.row(
        types.KeyboardButton(text=t("menu_browse", lang)),
        types.KeyboardButton(text=t("menu_profile", lang)),
    )
    builder.row(
        types.KeyboardButton(text=t("menu_matches", lang)),
        types.KeyboardButton(text=t("menu_add_book", lang)),
    )
    builder.row(
        types.KeyboardButton(text=t("menu_toggle_status", lang)),
        types.KeyboardButton(text=t("menu_help", lang)),
    )
    builder.row(types.KeyboardButton(text=t("menu_language", lang)))
    return builder.as_markup(resize_keyboard=True, one_time_keyboard=False)


def get_back_keyboard(text: str) -> types.ReplyKeyboardMarkup:
    """Single button keyboard, used for cancel while typing free text."""
    builder = ReplyKeyboardBuilder()
    builder.row(types.KeyboardButton(text=text))
    return builder.as_markup(resize_keyboard=True)


def get_condition_keyboard(lang: str | None, cancel_key: str = "cancel") -> types.ReplyKeyboardMarkup:
    builder = ReplyKeyboardBuilder()
    labels = [t(f"condition_{condition}", lang) for condition in BookCondition.values()]
    builder.row(types.KeyboardButton(text=labels[0]), types.KeyboardButton(text=labels[1]))
    builder.row(types.KeyboardButton(text=labels[2]), types.KeyboardButton(text=labels[3]))
    builder.row(types.KeyboardButton(text=t(cancel_key, lang)))
    return builder.as_markup(resize_keyboard=True)


def get_yes_no_keyboard(lang: str | None) -> types.ReplyKeyboardMarkup:
    builder = ReplyKeyboardBuilder()
    builder.row(
        types.KeyboardButton(text=t("yes", lang)),
        types.KeyboardButton(text=t("no", lang)),
    )
    return builder.as_markup(resize_keyboard=True)


def get_browse_keyboard(lang: str | None) -> types.ReplyKeyboardMarkup:
    builder = ReplyKeyboardBuilder()
    builder.row(
        types.KeyboardButton(text=t("browse_skip", lang)),
        types.KeyboardButton(text=t("browse_like", lang)),
    )
    builder.row(types.KeyboardButton(text=t("back_to_main", lang)))
    return builder.as_markup(resize_keyboard=True)


def get_profile_menu_keyboard(lang: str | None) -> types.ReplyKeyboardMarkup:
    builder = ReplyKeyboardBuilder()
    builder.row(
        types.KeyboardButton(text=t("menu_toggle_status", lang)),
        types.KeyboardButton(text=t("profile_manage_books", lang)),
    )
    builder.row(types.KeyboardButton(text=t("menu_add_book", lang)))
    builder.row(types.KeyboardButton(text=t("back_to_main", lang)))
    return builder.as_markup(resize_keyboard=True)


def get_manage_books_keyboard(user: User, lang: str | None, max_books: int = 3) -> types.ReplyKeyboardMarkup:
    """One delete button per book, numbered by its current position."""
    builder = ReplyKeyboardBuilder()
    for position, book in enumerate(user.books, start=1):
        builder.row(types.KeyboardButton(text=t("delete_book_button", lang, position, book.title)))
    if len(user.books) < max_books:
        builder.row(types.KeyboardButton(text=t("menu_add_book", lang)))
    builder.row(types.KeyboardButton(text=t("back_to_profile", lang)))
    return builder.as_markup(resize_keyboard=True)


def get_confirm_delete_keyboard(lang: str | None) -> types.ReplyKeyboardMarkup:
    builder = ReplyKeyboardBuilder()
    builder.row(
        types.KeyboardButton(text=t("delete_confirm", lang)),
        types.KeyboardButton(text=t("delete_reject", lang)),
    )
    builder.row(types.KeyboardButton(text=t("back_to_profile", lang)))
    return builder.as_markup(resize_keyboard=True)


def get_language_keyboard() -> types.ReplyKeyboardMarkup:
    builder = ReplyKeyboardBuilder()
    builder.row(*(types.KeyboardButton(text=name) for name in AVAILABLE_LANGUAGES.values()))
    builder.row(types.KeyboardButton(text=t("back_language")))
    return builder.as_markup(resize_keyboard=True)
