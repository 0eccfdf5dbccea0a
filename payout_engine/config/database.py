"""
Database configuration.

Async engine and session factory shared by services and jobs.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from payout_engine.config.settings import settings


def create_engine_from_url(url: str, echo: bool = False) -> AsyncEngine:
    """
    Create async engine for the given URL.

    Args:
        url: SQLAlchemy async database URL
        echo: Log SQL statements

    Returns:
        AsyncEngine instance
    """
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=echo)
    return create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
    )


def create_session_maker(
    engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Create session maker bound to engine."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async_engine = create_engine_from_url(
    settings.database_url, echo=settings.database_echo
)
async_session_maker = create_session_maker(async_engine)
