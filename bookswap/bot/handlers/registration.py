"""Onboarding dialog: collect books until the user stops or the shelf is full."""

from bookswap.bot.actions import DialogInput, resolve_dialog_input
from bookswap.bot.context import Turn
from bookswap.bot.handlers.book_form import TITLE_STEP, collect_book
from bookswap.bot.keyboards.reply import get_back_keyboard, get_main_keyboard, get_yes_no_keyboard

ADD_ANOTHER_STEP = 4


async def process_registration(turn: Turn) -> None:
    if resolve_dialog_input(turn.text) == DialogInput.CANCEL:
        turn.session.reset()
        turn.reply(turn.t("registration_cancelled"), get_main_keyboard(turn.lang))
        return

    if turn.session.step == ADD_ANOTHER_STEP:
        if resolve_dialog_input(turn.text) == DialogInput.YES:
            turn.session.step = TITLE_STEP
            turn.session.temp_data = {}
            turn.reply(turn.t("registration_next_title"), get_back_keyboard(turn.t("cancel_registration")))
        else:
            complete_registration(turn)
        return

    saved = await collect_book(turn, cancel_key="cancel_registration", title_prompt_key="registration_start")
    if saved is None:
        return

    _, user = saved
    remaining = turn.max_books - len(user.books)
    if remaining > 0:
        turn.session.step = ADD_ANOTHER_STEP
        turn.reply(turn.t("registration_add_another", remaining), get_yes_no_keyboard(turn.lang))
    else:
        complete_registration(turn)


def complete_registration(turn: Turn) -> None:
    turn.session.reset()
    turn.reply(turn.t("registration_complete"), get_main_keyboard(turn.lang))
