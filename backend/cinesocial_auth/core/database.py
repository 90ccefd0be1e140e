"""Async database engine and session management.

Configures the SQLAlchemy async engine and provides dependency injection for
database sessions. The engine is created in the application lifespan and kept
on ``app.state`` rather than at import time, so tests and workers each own
their engine.
"""

from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from cinesocial_auth.models import Base


def create_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """Create an async engine for the given URL.

    Args:
        database_url: SQLAlchemy async URL (postgresql+asyncpg or sqlite+aiosqlite).
        echo: Log every SQL statement.

    Returns:
        Configured AsyncEngine.
    """
    return create_async_engine(database_url, echo=echo, pool_pre_ping=True)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Build the session factory bound to an engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a database session."""
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
