from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from disc_insights.core.config import app_settings


def get_async_engine(db_url: str = app_settings.database_url) -> AsyncEngine:
    """Creates an asynchronous SQLAlchemy engine instance."""
    if db_url.startswith("sqlite"):
        # SQLite pools do not take size/overflow arguments
        return create_async_engine(db_url, echo=False)
    return create_async_engine(
        db_url,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_recycle=1800,  # 30 minutes
        echo=False,
    )


def get_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Creates an asynchronous session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# Create engine and session factory instances
async_engine = get_async_engine()
SessionFactory = get_session_factory(async_engine)


async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency to provide a database session.

    Handles session creation, commit, rollback, and closing.
    """
    async with SessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_session_factory_dependency() -> async_sessionmaker[AsyncSession]:
    """FastAPI dependency for code that opens its own short-lived sessions (analysis cache, background tasks)."""
    return SessionFactory
