from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from bookswap.db.models import Book, User, UserStatus
from bookswap.db.repositories import decision_repo


class CandidateSelector:
    """
    Picks the next user whose books are shown while browsing.

    A candidate is active, has at least one book, is not the requester and has
    never been liked or skipped by the requester. Skips are permanent, so once
    every eligible user has been decided on there is nothing left to show.
    """

    async def select_candidate(self, session: AsyncSession, telegram_id: int) -> User | None:
        decided = await decision_repo.get_decided_user_ids(session, telegram_id)
        excluded = decided | {telegram_id}

        has_books = select(Book.id).where(Book.user_id == User.id).exists()
        query = (
            select(User)
            .where(
                User.status == UserStatus.ACTIVE.value,
                has_books,
                User.telegram_id.not_in(excluded),
            )
            # Uniform pick over the eligible set
            .order_by(func.random())
            .limit(1)
        )
        result = await session.execute(query)
        candidate = result.scalar_one_or_none()

        if candidate is None:
            logger.info(f"No candidates left for user {telegram_id} ({len(decided)} already decided)")
        else:
            logger.debug(f"Selected candidate {candidate.telegram_id} for user {telegram_id}")
        return candidate
