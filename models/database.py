import logging
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import AsyncIterator, Awaitable, Callable, Optional, TypeVar

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from config import Settings
from models.models import Base


logger = logging.getLogger(__name__)

T = TypeVar("T")

# Session of the transaction opened by TransactionManager.run in this task
_current_session: ContextVar[Optional[AsyncSession]] = ContextVar("current_session", default=None)


def create_engine(settings: Settings) -> AsyncEngine:
    return create_async_engine(
        settings.async_database_url,
        echo=settings.DB_ECHO,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
    )


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine):
    """Create all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")


class Database:
    """Hands out sessions to repositories.

    Inside ``TransactionManager.run`` every repository call shares the
    transaction's session. Outside of it each call gets a short-lived
    session of its own.
    """

    def __init__(self, session_maker: async_sessionmaker):
        self.session_maker = session_maker

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        current = _current_session.get()
        if current is not None:
            yield current
            return

        async with self.session_maker() as session:
            async with session.begin():
                yield session

    async def ping(self) -> bool:
        async with self.session() as session:
            await session.execute(text("SELECT 1"))
        return True


class TransactionManager:
    def __init__(self, database: Database):
        self.database = database

    async def run(self, fn: Callable[[], Awaitable[T]]) -> T:
        """Await ``fn`` in one transaction.

        Commits when ``fn`` returns, rolls back and re-raises when it raises.
        A nested call joins the outer transaction.
        """
        if _current_session.get() is not None:
            return await fn()

        async with self.database.session_maker() as session:
            async with session.begin():
                token = _current_session.set(session)
                try:
                    return await fn()
                finally:
                    _current_session.reset(token)
