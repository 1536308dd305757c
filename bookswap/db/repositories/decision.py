from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from bookswap.db.models import Decision, DecisionAction
from bookswap.db.repositories.base import BaseRepository


class DecisionRepository(BaseRepository[Decision]):
    """Repository for like/skip decisions."""

    def __init__(self):
        super().__init__(Decision)

    async def find(
        self, session: AsyncSession, from_user_id: int, to_user_id: int, action: DecisionAction
    ) -> Decision | None:
        query = select(Decision).where(
            Decision.from_user_id == from_user_id,
            Decision.to_user_id == to_user_id,
            Decision.action == action.value,
        )
        result = await session.execute(query)
        return result.scalar_one_or_none()

    async def add_if_absent(
        self, session: AsyncSession, from_user_id: int, to_user_id: int, action: DecisionAction
    ) -> tuple[Decision, bool]:
        """
        Insert a decision unless the identical one exists.

        Returns:
            Tuple of (decision, created). A unique violation from a concurrent
            insert of the same decision counts as already recorded.
        """
        existing = await self.find(session, from_user_id, to_user_id, action)
        if existing:
            logger.debug(f"Decision {from_user_id} -{action.value}-> {to_user_id} already recorded")
            return existing, False

        decision = Decision(from_user_id=from_user_id, to_user_id=to_user_id, action=action.value)
        session.add(decision)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            logger.info(f"Concurrent duplicate decision {from_user_id} -{action.value}-> {to_user_id}")
            existing = await self.find(session, from_user_id, to_user_id, action)
            if existing is None:
                raise
            return existing, False
        return decision, True

    async def get_decided_user_ids(self, session: AsyncSession, from_user_id: int) -> set[int]:
        """Telegram ids this user has already liked or skipped."""
        query = select(Decision.to_user_id).where(Decision.from_user_id == from_user_id)
        result = await session.execute(query)
        return set(result.scalars().all())


# Create a singleton instance
decision_repo = DecisionRepository()
