from typing import Generic, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from bookswap.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Common lookups shared by all repositories."""

    def __init__(self, model: Type[ModelType]):
        self.model = model

    async def get(self, session: AsyncSession, obj_id: int) -> ModelType | None:
        """Get a row by primary key."""
        return await session.get(self.model, obj_id)
