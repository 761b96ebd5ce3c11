"""
Database connection and session management.
"""

from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)

from .config import get_settings


def build_engine(url: str | None = None, **kwargs: Any) -> AsyncEngine:
    """
    Create an async engine from settings.

    Pool sizing only applies to server databases; SQLite URLs get the
    driver defaults unless overridden through kwargs.
    """
    settings = get_settings().database
    url = url or settings.url

    options: dict[str, Any] = {"echo": settings.echo}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.pool_size,
            max_overflow=settings.pool_overflow,
            pool_timeout=settings.pool_timeout,
        )
    options.update(kwargs)

    return create_async_engine(url, **options)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Initialize database (create tables)."""
    from rolegate.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
