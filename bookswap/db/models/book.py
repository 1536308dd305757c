from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookswap.db.base import Base

TEXT_MAX_LENGTH = 255


class BookCondition(str, Enum):
    """Canonical book conditions, in the order they are offered to users."""
    NEW = "new"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


class Book(Base):
    """A book listed by a user. The id stays stable while positions shift."""

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)

    title: Mapped[str] = mapped_column(String(TEXT_MAX_LENGTH), nullable=False)
    author: Mapped[str] = mapped_column(String(TEXT_MAX_LENGTH), nullable=False)
    condition: Mapped[str | None] = mapped_column(String(10), nullable=True)

    added_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    owner = relationship("User", back_populates="books")

    def __repr__(self) -> str:
        return f"<Book {self.id}: '{self.title}' by {self.author} ({self.condition})>"
