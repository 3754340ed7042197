"""Engine construction for the account store."""
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from .config import Settings


def build_engine(settings: Settings) -> AsyncEngine:
    """Create an async engine, pooled or open-then-close per request."""

    connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite+") else {}
    options: dict = {"future": True, "echo": False, "connect_args": connect_args}
    if not settings.db_pool:
        options["poolclass"] = NullPool
    elif not settings.database_url.startswith("sqlite+"):
        options.update(
            pool_size=settings.db_pool_size,
            pool_timeout=settings.db_connect_timeout,
            pool_pre_ping=True,
        )
    return create_async_engine(settings.database_url, **options)


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)
