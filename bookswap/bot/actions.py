"""
Input normalization.

Raw message text is mapped once to a canonical tag here, so handlers branch on
MenuAction / DialogInput values and never compare against localized strings.
"""

import re
from enum import Enum

from bookswap.core.localization import TRANSLATIONS, labels_for, t
from bookswap.db.models import BookCondition


class MenuAction(str, Enum):
    """Global commands that work from any state."""
    START = "start"
    BROWSE = "browse"
    PROFILE = "profile"
    MATCHES = "matches"
    ADD_BOOK = "add_book"
    TOGGLE_STATUS = "toggle_status"
    HELP = "help"
    LANGUAGE = "language"
    MAIN_MENU = "main_menu"


class DialogInput(str, Enum):
    """Inputs that only mean something inside a dialog."""
    CANCEL = "cancel"
    YES = "yes"
    NO = "no"
    LIKE = "like"
    SKIP = "skip"
    MANAGE_BOOKS = "manage_books"
    BACK_TO_PROFILE = "back_to_profile"
    CONFIRM_DELETE = "confirm_delete"
    REJECT_DELETE = "reject_delete"
    BACK = "back"


SLASH_COMMANDS = {
    "/start": MenuAction.START,
    "/browse": MenuAction.BROWSE,
    "/profile": MenuAction.PROFILE,
    "/matches": MenuAction.MATCHES,
    "/add": MenuAction.ADD_BOOK,
    "/status": MenuAction.TOGGLE_STATUS,
    "/help": MenuAction.HELP,
    "/language": MenuAction.LANGUAGE,
    "/menu": MenuAction.MAIN_MENU,
}

_MENU_LABEL_KEYS = {
    "menu_browse": MenuAction.BROWSE,
    "menu_profile": MenuAction.PROFILE,
    "menu_matches": MenuAction.MATCHES,
    "menu_add_book": MenuAction.ADD_BOOK,
    "menu_toggle_status": MenuAction.TOGGLE_STATUS,
    "menu_help": MenuAction.HELP,
    "menu_language": MenuAction.LANGUAGE,
    "back_to_main": MenuAction.MAIN_MENU,
}

_DIALOG_LABEL_KEYS = {
    "cancel": DialogInput.CANCEL,
    "cancel_registration": DialogInput.CANCEL,
    "yes": DialogInput.YES,
    "no": DialogInput.NO,
    "browse_like": DialogInput.LIKE,
    "browse_skip": DialogInput.SKIP,
    "profile_manage_books": DialogInput.MANAGE_BOOKS,
    "back_to_profile": DialogInput.BACK_TO_PROFILE,
    "delete_confirm": DialogInput.CONFIRM_DELETE,
    "delete_reject": DialogInput.REJECT_DELETE,
    "back_language": DialogInput.BACK,
}


def _build_label_map(keys: dict) -> dict[str, Enum]:
    mapping = {}
    for key, tag in keys.items():
        for label in labels_for(key):
            mapping[label] = tag
    return mapping


MENU_LABELS = _build_label_map(_MENU_LABEL_KEYS)
DIALOG_LABELS = _build_label_map(_DIALOG_LABEL_KEYS)
DIALOG_LABELS["/cancel"] = DialogInput.CANCEL

# Typed answers accepted at the "add another book?" step
_TYPED_YES = {"yes", "y", "да"}

_DELETE_PREFIXES = tuple(
    texts["delete_book_button"].split("%d")[0] for texts in TRANSLATIONS.values()
)
_POSITION = re.compile(r"(\d+)\s*:")


def resolve_menu_action(text: str | None) -> MenuAction | None:
    """Map slash commands and main-menu labels of any language to a MenuAction."""
    if not text:
        return None
    text = text.strip()
    if text.startswith("/"):
        # "/start payload" and "/start@BotName" both mean /start
        command = text.split(maxsplit=1)[0].split("@", 1)[0].lower()
        return SLASH_COMMANDS.get(command)
    return MENU_LABELS.get(text)


def resolve_dialog_input(text: str | None) -> DialogInput | None:
    if not text:
        return None
    text = text.strip()
    tag = DIALOG_LABELS.get(text)
    if tag is None and text.lower() in _TYPED_YES:
        return DialogInput.YES
    return tag


def parse_delete_selection(text: str | None) -> int | None:
    """
    Extract the 1-based book position from a "❌ Book N: title" button.

    Returns None when the text is not a delete button or has no position.
    """
    if not text:
        return None
    for prefix in _DELETE_PREFIXES:
        if text.startswith(prefix):
            match = _POSITION.match(text[len(prefix):])
            if match:
                return int(match.group(1))
    return None


def normalize_condition(text: str | None, lang_code: str | None) -> str | None:
    """
    Map condition input back to a canonical BookCondition value.

    The lowered input is checked for containing each localized label in the
    order new, good, fair, poor; the first hit wins. Otherwise the lowered text
    itself is used. Returns None unless the result is a valid condition.
    """
    raw = (text or "").lower()
    value = None
    for condition in BookCondition.values():
        label = t(f"condition_{condition}", lang_code).lower()
        if label in raw:
            value = condition
            break
    if value is None:
        value = raw.strip()
    return value if value in BookCondition.values() else None
