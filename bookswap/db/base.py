from sqlalchemy import MetaData, inspect, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from loguru import logger

# Naming convention for constraints
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)


class Base(DeclarativeBase):
    """Base class for all models."""
    metadata = metadata


def get_async_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create the SQLAlchemy async engine for the given URL."""
    logger.info(f"Using database driver: {database_url.split('://')[0]}")

    if database_url.startswith("sqlite"):
        return create_async_engine(database_url, echo=echo)

    # PostgreSQL specific connect args for asyncpg
    connect_args = {
        "timeout": 10,  # Connection timeout in seconds
        "server_settings": {
            "application_name": "bookswap",
        },
    }
    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,               # Verify connections before using them
        pool_recycle=300,                 # Recycle connections every 5 minutes
        pool_timeout=30,
        pool_size=5,
        max_overflow=10,
        connect_args=connect_args,
    )


def get_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the async session factory bound to an engine."""
    return async_sessionmaker(
        engine,
        expire_on_commit=False,
        class_=AsyncSession,
    )


async def init_models(engine: AsyncEngine) -> None:
    """Create any missing tables."""
    # Register all models on the metadata before create_all
    from bookswap.db import models  # noqa: F401

    logger.info("Initializing database models...")
    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
        logger.info("Database connection successful")

        tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
        logger.info(f"Found existing tables: {tables}")

        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database models initialization complete.")
