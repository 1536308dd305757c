from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from bookswap.db.models import DecisionAction, Match
from bookswap.db.repositories import decision_repo, match_repo


@dataclass
class DecisionOutcome:
    """Result of recording a like or skip."""
    matched: bool = False
    match_id: int | None = None
    # True only for the call that actually inserted the match row
    created: bool = False


class MatchEngine:
    """
    Records like/skip decisions and turns reciprocal likes into matches.

    Repeating a decision is harmless: the decision is stored once and the
    reciprocity check still runs. At most one match exists per pair; a unique
    violation on insert means the other side won the race and is reported as
    "already matched" rather than an error. Other store failures propagate.
    """

    async def record_decision(
        self,
        session: AsyncSession,
        from_user_id: int,
        to_user_id: int,
        action: DecisionAction,
    ) -> DecisionOutcome:
        if from_user_id == to_user_id:
            raise ValueError("Users cannot decide on themselves")

        _, inserted = await decision_repo.add_if_absent(session, from_user_id, to_user_id, action)
        logger.info(
            f"Decision {from_user_id} -{action.value}-> {to_user_id} "
            f"({'recorded' if inserted else 'already recorded'})"
        )

        if action != DecisionAction.LIKE:
            return DecisionOutcome()

        reciprocal = await decision_repo.find(session, to_user_id, from_user_id, DecisionAction.LIKE)
        if reciprocal is None:
            return DecisionOutcome()

        match, created = await self._get_or_create_match(session, from_user_id, to_user_id)
        return DecisionOutcome(matched=True, match_id=match.id, created=created)

    async def _get_or_create_match(self, session: AsyncSession, user_a: int, user_b: int) -> tuple[Match, bool]:
        existing = await match_repo.get_for_pair(session, user_a, user_b)
        if existing:
            logger.debug(f"Users {user_a} and {user_b} are already matched ({existing.id})")
            return existing, False

        try:
            match = await match_repo.create(session, user_a, user_b)
        except IntegrityError:
            await session.rollback()
            existing = await match_repo.get_for_pair(session, user_a, user_b)
            if existing is None:
                raise
            logger.info(f"Match {existing.id} for {user_a} and {user_b} was created concurrently")
            return existing, False

        logger.info(f"New match {match.id}: {user_a} <-> {user_b}")
        return match, True
