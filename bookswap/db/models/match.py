from datetime import datetime
from enum import Enum

from sqlalchemy import BigInteger, CheckConstraint, DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bookswap.db.base import Base


class MatchStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class Match(Base):
    """
    A mutual like between two users.

    The pair is stored ordered (low, high) so the unique constraint holds
    whichever user liked first.
    """

    __tablename__ = "matches"
    __table_args__ = (
        UniqueConstraint("user_low_id", "user_high_id", name="uq_matches_pair"),
        CheckConstraint("user_low_id < user_high_id", name="ordered_pair"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_low_id: Mapped[int] = mapped_column(BigInteger, index=True)
    user_high_id: Mapped[int] = mapped_column(BigInteger, index=True)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=MatchStatus.ACTIVE.value,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    @staticmethod
    def ordered_pair(user_a: int, user_b: int) -> tuple[int, int]:
        return (user_a, user_b) if user_a < user_b else (user_b, user_a)

    @property
    def users(self) -> tuple[int, int]:
        return self.user_low_id, self.user_high_id

    def other_user(self, telegram_id: int) -> int:
        return self.user_high_id if telegram_id == self.user_low_id else self.user_low_id

    def __repr__(self) -> str:
        return f"<Match {self.id}: {self.user_low_id} <-> {self.user_high_id} ({self.status})>"
