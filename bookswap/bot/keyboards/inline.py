from aiogram import types
from aiogram.filters.callback_data import CallbackData
from aiogram.utils.keyboard import InlineKeyboardBuilder

from bookswap.core.localization import t
from bookswap.db.models import DecisionAction


class BrowseCallback(CallbackData, prefix="browse"):
    """Like/skip pressed on a shown candidate."""
    action: DecisionAction
    candidate_id: int


def get_candidate_keyboard(candidate_id: int, lang: str | None) -> types.InlineKeyboardMarkup:
    """Inline like/skip buttons attached to a candidate's book listing."""
    builder = InlineKeyboardBuilder()
    builder.button(
        text=t("browse_skip", lang),
        callback_data=BrowseCallback(action=DecisionAction.SKIP, candidate_id=candidate_id),
    )
    builder.button(
        text=t("browse_like", lang),
        callback_data=BrowseCallback(action=DecisionAction.LIKE, candidate_id=candidate_id),
    )
    builder.adjust(2)
    return builder.as_markup()
