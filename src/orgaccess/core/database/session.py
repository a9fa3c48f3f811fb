"""Async database session management.

The store is an embedded SQLite file by default; pointing DATABASE_URL at
postgresql+asyncpg needs no code changes here.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from orgaccess.config import settings
from orgaccess.core.database.base import Base


# NullPool for SQLite to avoid sharing file handles across event loops
async_engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    poolclass=NullPool if settings.is_sqlite else None,
    pool_pre_ping=not settings.is_sqlite,
)

async_session_factory = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a database session.

    Usage:
        @router.get("/items")
        async def list_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create all tables for the access-control collections."""
    from orgaccess.core.permissions import models  # noqa: F401
    from orgaccess.modules.users import models as user_models  # noqa: F401

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
