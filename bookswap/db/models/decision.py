from datetime import datetime
from enum import Enum

from sqlalchemy import BigInteger, DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bookswap.db.base import Base


class DecisionAction(str, Enum):
    LIKE = "like"
    SKIP = "skip"


class Decision(Base):
    """
    A like or skip from one user towards another, keyed by Telegram ids.

    Decisions are never updated or deleted, so a skip is permanent.
    """

    __tablename__ = "decisions"
    __table_args__ = (
        UniqueConstraint("from_user_id", "to_user_id", "action", name="uq_decisions_pair_action"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    from_user_id: Mapped[int] = mapped_column(BigInteger, index=True)
    to_user_id: Mapped[int] = mapped_column(BigInteger, index=True)
    action: Mapped[str] = mapped_column(String(10), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<Decision {self.id}: {self.from_user_id} -{self.action}-> {self.to_user_id}>"
