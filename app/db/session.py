"""
Async engine and sessions.

PostgreSQL via asyncpg in deployments; SQLite via aiosqlite under test.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings
from app.core.logging import logger

engine_kwargs = {
    "echo": settings.debug and settings.environment.value != "testing",
    "pool_pre_ping": True,
}

# SQLite pools do not accept sizing arguments
if not settings.database.is_sqlite:
    engine_kwargs.update(
        pool_size=settings.database.pool_size,
        max_overflow=settings.database.max_overflow,
        pool_recycle=settings.database.pool_recycle,
    )

engine = create_async_engine(settings.database.url, **engine_kwargs)

AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session for the report write path.

    Uncommitted work is rolled back if the endpoint raises.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            logger.exception("Rolling back request session")
            await session.rollback()
            raise


def get_session_factory() -> async_sessionmaker:
    """
    Factory for read repositories.

    Metrics reads run concurrently and each one opens its own short-lived
    session, so they take the factory rather than a shared session.
    """
    return AsyncSessionLocal
