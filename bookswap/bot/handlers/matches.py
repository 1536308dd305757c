from bookswap.bot.context import Turn
from bookswap.bot.keyboards.reply import get_main_keyboard
from bookswap.bot.utils.formatting import format_match_list_entry
from bookswap.db.repositories import match_repo, user_repo


async def show_matches(turn: Turn) -> None:
    """List active matches with the partner's books and contact."""
    matches = await match_repo.list_for_user(turn.db, turn.user.id)
    if not matches:
        turn.reply(turn.t("matches_none"), get_main_keyboard(turn.lang))
        return

    partner_ids = [match.other_user(turn.user.id) for match in matches]
    partners = await user_repo.get_many_by_telegram_ids(turn.db, partner_ids)

    entries = [
        format_match_list_entry(position, partners[partner_id], turn.lang)
        for position, partner_id in enumerate((pid for pid in partner_ids if pid in partners), start=1)
    ]
    text = "\n\n".join([turn.t("matches_header"), *entries, turn.t("matches_footer")])
    turn.reply(text, get_main_keyboard(turn.lang))
