import asyncio

from loguru import logger

from bookswap.bot.utils.formatting import format_books, format_contact
from bookswap.bot.utils.messaging import Notifier
from bookswap.core.localization import t
from bookswap.db.models import User


def build_match_message(partner: User, lang: str | None) -> str:
    """Text for the user who completed the match."""
    contact = format_contact(partner, lang)
    return t(
        "match_notification_all_books",
        lang,
        partner.display_name,
        format_books(partner.books, lang),
        contact,
    )


def build_partner_match_message(initiator: User, partner_lang: str | None) -> str:
    """Text for the other side, in their own language."""
    contact = format_contact(initiator, partner_lang)
    return t(
        "match_notification_other_all_books",
        partner_lang,
        initiator.display_name,
        format_books(initiator.books, partner_lang),
        contact,
    )


class MatchNotifier:
    """
    Delivers the match message to the user who did not trigger the match.

    Delivery runs as a background task and failures are only logged: the match
    is already stored and stays valid whether or not the message arrives.
    """

    def __init__(self, notifier: Notifier):
        self.notifier = notifier
        self._tasks: set[asyncio.Task] = set()

    def notify_partner(self, initiator: User, partner: User) -> asyncio.Task:
        text = build_partner_match_message(initiator, partner.language)
        task = asyncio.create_task(self._deliver(partner.telegram_id, text))
        # Keep a reference until done so the task is not garbage collected
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _deliver(self, user_id: int, text: str) -> None:
        try:
            delivered = await self.notifier.send_direct(user_id, text)
        except Exception as e:
            logger.error(f"Match notification to {user_id} failed: {e}")
            return
        if not delivered:
            logger.error(f"Match notification to {user_id} was not delivered")

    async def wait_pending(self) -> None:
        """Wait for notifications still in flight (shutdown, tests)."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
