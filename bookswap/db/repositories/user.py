from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from bookswap.core.exceptions import BookLimitError, InvalidBookError
from bookswap.db.models import TEXT_MAX_LENGTH, Book, BookCondition, User, UserStatus
from bookswap.db.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for users and the books they own."""

    def __init__(self):
        super().__init__(User)

    async def get_by_telegram_id(self, session: AsyncSession, telegram_id: int) -> User | None:
        """Get a user by Telegram ID, with books loaded."""
        # populate_existing reloads rows the identity map holds expired after a rollback
        query = select(User).where(User.telegram_id == telegram_id).execution_options(populate_existing=True)
        result = await session.execute(query)
        return result.scalar_one_or_none()

    async def get_or_create_user(self, session: AsyncSession, user_dict: dict) -> tuple[User, bool]:
        """
        Get or create a user from Telegram profile data.

        Args:
            session: Database session
            user_dict: Dict with "id" (Telegram id) and optional
                "first_name", "last_name", "username", "language"

        Returns:
            Tuple of (user, created)
        """
        user = await self.get_by_telegram_id(session, user_dict["id"])
        if user:
            # Keep the handle fresh so match contacts stay reachable
            if user_dict.get("username") and user.username != user_dict["username"]:
                user.username = user_dict["username"]
                await session.commit()
            return user, False

        user = User(
            telegram_id=user_dict["id"],
            first_name=user_dict.get("first_name"),
            last_name=user_dict.get("last_name"),
            username=user_dict.get("username"),
            language=user_dict.get("language"),
            status=UserStatus.ACTIVE.value,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user, ["books"])
        logger.info(f"Created user {user.id} for Telegram id {user.telegram_id}")
        return user, True

    async def add_book(
        self,
        session: AsyncSession,
        user: User,
        title: str,
        author: str,
        condition: str | None,
        max_books: int = 3,
    ) -> Book:
        """Append a book to the user's list, enforcing the per-user cap."""
        title = (title or "").strip()
        author = (author or "").strip()
        if not title or not author:
            raise InvalidBookError("Book title and author are required")
        if len(title) > TEXT_MAX_LENGTH or len(author) > TEXT_MAX_LENGTH:
            raise InvalidBookError(f"Book title and author must be at most {TEXT_MAX_LENGTH} characters")
        if condition is not None and condition not in BookCondition.values():
            raise InvalidBookError(f"Unknown book condition: {condition}")
        if len(user.books) >= max_books:
            raise BookLimitError(user.telegram_id, max_books)

        book = Book(title=title, author=author, condition=condition)
        user.books.append(book)
        await session.commit()
        logger.info(f"User {user.telegram_id} added book {book.id} '{title}' ({len(user.books)}/{max_books})")
        return book

    async def delete_book(self, session: AsyncSession, user: User, book_id: int) -> Book | None:
        """Remove one of the user's books by id. Returns None if the user no longer has it."""
        # Re-read the list so a change made from another device is seen
        await session.refresh(user, ["books"])
        book = next((b for b in user.books if b.id == book_id), None)
        if book is None:
            logger.warning(f"User {user.telegram_id} tried to delete missing book {book_id}")
            return None

        user.books.remove(book)
        await session.commit()
        logger.info(f"User {user.telegram_id} deleted book {book_id} '{book.title}'")
        return book

    async def toggle_status(self, session: AsyncSession, user: User) -> str:
        """Flip between active and inactive and return the new status."""
        user.status = (
            UserStatus.INACTIVE.value if user.status == UserStatus.ACTIVE.value else UserStatus.ACTIVE.value
        )
        await session.commit()
        return user.status

    async def set_language(self, session: AsyncSession, user: User, language: str) -> None:
        user.language = language
        await session.commit()

    async def get_many_by_telegram_ids(self, session: AsyncSession, telegram_ids: list[int]) -> dict[int, User]:
        if not telegram_ids:
            return {}
        result = await session.execute(select(User).where(User.telegram_id.in_(telegram_ids)))
        return {user.telegram_id: user for user in result.scalars().all()}


# Create a singleton instance
user_repo = UserRepository()
