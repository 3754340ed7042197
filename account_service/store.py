"""Access layer over the ``users`` table."""
from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from .config import Settings
from .database import build_engine, build_sessionmaker
from .errors import StoreError, UsernameTaken
from .models import Base, User

# asyncio.TimeoutError is not an OSError before Python 3.11.
STORE_FAILURES = (SQLAlchemyError, OSError, asyncio.TimeoutError)


def _describe(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


class UserStore:
    """Owns the engine and hands out one session per operation.

    Every public method is a single round trip. Database failures surface
    as :class:`StoreError`; a duplicate username on insert surfaces as
    :class:`UsernameTaken`.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self._sessionmaker = build_sessionmaker(engine)
        self._schema_ready = False
        self._schema_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "UserStore":
        return cls(build_engine(settings))

    async def dispose(self) -> None:
        await self.engine.dispose()

    async def ensure_schema(self) -> None:
        """Create the users table if it is missing. Runs at most once per store."""

        if self._schema_ready:
            return
        async with self._schema_lock:
            if self._schema_ready:
                return
            try:
                async with self.engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)
            except STORE_FAILURES as exc:
                raise StoreError(_describe(exc)) from exc
            self._schema_ready = True

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session, translating driver failures into StoreError."""

        await self.ensure_schema()
        try:
            async with self._sessionmaker() as session:
                yield session
        except STORE_FAILURES as exc:
            raise StoreError(_describe(exc)) from exc

    async def ping(self) -> int:
        """Prove connectivity with a trivial read; returns the row count."""

        return await self.count()

    async def count(self) -> int:
        async with self.session() as session:
            result = await session.execute(select(func.count()).select_from(User))
            return int(result.scalar_one())

    async def get_by_username(self, username: str) -> User | None:
        async with self.session() as session:
            result = await session.execute(select(User).where(User.username == username))
            return result.scalar_one_or_none()

    async def exists(self, username: str) -> bool:
        async with self.session() as session:
            result = await session.execute(
                select(User.id).where(User.username == username).limit(1)
            )
            return result.scalar_one_or_none() is not None

    async def add(
        self, username: str, password: str, android_id: str | None = None
    ) -> User:
        """Insert a new user. The unique constraint decides concurrent races."""

        async with self.session() as session:
            user = User(username=username, password=password, android_id=android_id)
            session.add(user)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise UsernameTaken(username) from exc
            await session.refresh(user)
            return user

    async def list_newest_first(self) -> Sequence[User]:
        async with self.session() as session:
            result = await session.execute(
                select(User).order_by(User.created_at.desc(), User.id.desc())
            )
            return list(result.scalars().all())
