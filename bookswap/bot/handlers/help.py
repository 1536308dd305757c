from bookswap.bot.context import Turn
from bookswap.bot.keyboards.reply import get_main_keyboard


async def show_help(turn: Turn) -> None:
    turn.reply(turn.t("help_text"), get_main_keyboard(turn.lang))
