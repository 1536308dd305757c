"""
Browsing other users' books.

Acting on a candidate is a two-phase response: the like/skip acknowledgement
(and the match message, if any) goes out and the session is saved first; the
next candidate is picked in a continuation afterwards.
"""

from loguru import logger

from bookswap.bot.actions import DialogInput, resolve_dialog_input
from bookswap.bot.context import Turn
from bookswap.bot.keyboards.inline import get_candidate_keyboard
from bookswap.bot.keyboards.reply import get_browse_keyboard, get_main_keyboard
from bookswap.bot.states import ConversationState
from bookswap.bot.utils.formatting import format_candidate
from bookswap.bot.utils.notifications import build_match_message
from bookswap.db.models import DecisionAction
from bookswap.db.repositories import decision_repo, user_repo

_DECISION_INPUTS = {
    DialogInput.LIKE: DecisionAction.LIKE,
    DialogInput.SKIP: DecisionAction.SKIP,
}


async def start_browsing(turn: Turn) -> None:
    user = await user_repo.get_by_telegram_id(turn.db, turn.user.id)
    if user is None:
        turn.reply(turn.t("error_not_registered"), get_main_keyboard(turn.lang))
        return
    if not user.books:
        turn.reply(turn.t("browse_no_books"), get_main_keyboard(turn.lang))
        return

    turn.session.enter(ConversationState.BROWSING)
    await show_next_candidate(turn)


async def show_next_candidate(turn: Turn) -> None:
    candidate = await turn.ctx.selector.select_candidate(turn.db, turn.user.id)
    if candidate is None:
        turn.session.reset()
        turn.reply(turn.t("browse_no_more_books"), get_main_keyboard(turn.lang))
        return

    turn.session.state = ConversationState.BROWSING
    turn.session.browsing.point_to(candidate.telegram_id)
    turn.reply(format_candidate(candidate, turn.lang), get_candidate_keyboard(candidate.telegram_id, turn.lang))
    turn.reply(turn.t("browse_question"), get_browse_keyboard(turn.lang))


async def process_browsing(turn: Turn) -> None:
    tag = resolve_dialog_input(turn.text)
    if tag in _DECISION_INPUTS:
        await decide(turn, _DECISION_INPUTS[tag])
        return
    if tag in (DialogInput.CANCEL, DialogInput.BACK):
        turn.session.reset()
        turn.reply(turn.t("browse_cancelled"), get_main_keyboard(turn.lang))
        return
    turn.reply(turn.t("browse_question"), get_browse_keyboard(turn.lang))


async def process_callback(turn: Turn, action: DecisionAction, candidate_id: int) -> None:
    """Like/skip pressed on an inline keyboard, possibly on an old message."""
    await decide(turn, action, candidate_id=candidate_id)


def _is_stale(turn: Turn, candidate_id: int | None) -> bool:
    browsing = turn.session.browsing
    if turn.session.state != ConversationState.BROWSING or browsing.current_candidate_id is None:
        return True
    if candidate_id is not None and candidate_id != browsing.current_candidate_id:
        return True
    return browsing.is_expired(turn.ctx.settings.BROWSE_TIMEOUT_SECONDS)


async def decide(turn: Turn, action: DecisionAction, candidate_id: int | None = None) -> None:
    if candidate_id is not None and candidate_id != turn.session.browsing.current_candidate_id:
        # A repeated tap on a candidate already decided changes nothing
        decided = await decision_repo.get_decided_user_ids(turn.db, turn.user.id)
        if candidate_id in decided:
            logger.debug(f"User {turn.user.id} repeated a decision on {candidate_id}, ignoring")
            return

    if _is_stale(turn, candidate_id):
        logger.info(f"User {turn.user.id} acted on an expired browsing session")
        turn.session.reset()
        turn.reply(turn.t("browse_session_expired"), get_main_keyboard(turn.lang))
        return

    # Capture the candidate and clear the pointer before the first store call
    target_id = turn.session.browsing.current_candidate_id
    turn.session.browsing.clear()

    outcome = await turn.ctx.engine.record_decision(turn.db, turn.user.id, target_id, action)
    turn.reply(turn.t("browse_liked" if action == DecisionAction.LIKE else "browse_skipped"))

    if outcome.created:
        await _announce_match(turn, target_id)

    turn.then(show_next_candidate)


async def _announce_match(turn: Turn, partner_id: int) -> None:
    user = await user_repo.get_by_telegram_id(turn.db, turn.user.id)
    partner = await user_repo.get_by_telegram_id(turn.db, partner_id)
    if user is None or partner is None:
        logger.warning(f"Match between {turn.user.id} and {partner_id} has a missing user")
        return

    turn.reply(build_match_message(partner, turn.lang))
    turn.ctx.match_notifier.notify_partner(user, partner)
