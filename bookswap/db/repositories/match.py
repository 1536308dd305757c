from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bookswap.db.models import Match, MatchStatus
from bookswap.db.repositories.base import BaseRepository


class MatchRepository(BaseRepository[Match]):
    """Repository for confirmed mutual matches."""

    def __init__(self):
        super().__init__(Match)

    async def get_for_pair(self, session: AsyncSession, user_a: int, user_b: int) -> Match | None:
        """Get the match between two users, in either order."""
        low, high = Match.ordered_pair(user_a, user_b)
        query = select(Match).where(Match.user_low_id == low, Match.user_high_id == high)
        result = await session.execute(query)
        return result.scalar_one_or_none()

    async def create(self, session: AsyncSession, user_a: int, user_b: int) -> Match:
        """
        Insert a match for the pair.

        Raises IntegrityError if the pair is already matched; callers decide
        whether that is an error.
        """
        if user_a == user_b:
            raise ValueError("A user cannot match with themselves")
        low, high = Match.ordered_pair(user_a, user_b)
        match = Match(user_low_id=low, user_high_id=high, status=MatchStatus.ACTIVE.value)
        session.add(match)
        await session.commit()
        await session.refresh(match)
        return match

    async def list_for_user(
        self, session: AsyncSession, telegram_id: int, status: MatchStatus | None = MatchStatus.ACTIVE
    ) -> list[Match]:
        """All matches containing the user, oldest first."""
        query = select(Match).where(
            or_(Match.user_low_id == telegram_id, Match.user_high_id == telegram_id)
        )
        if status is not None:
            query = query.where(Match.status == status.value)
        result = await session.execute(query.order_by(Match.id))
        return list(result.scalars().all())


# Create a singleton instance
match_repo = MatchRepository()
