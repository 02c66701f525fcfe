import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clock import Clock, SystemClock
from errors import RepositoryError
from models.database import Database


def new_id() -> str:
    return str(uuid.uuid4())


class BaseRepository:
    def __init__(self, database: Database, clock: Optional[Clock] = None):
        self.database = database
        self.clock = clock or SystemClock()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Session of the current transaction; storage errors become RepositoryError."""
        try:
            async with self.database.session() as session:
                yield session
        except SQLAlchemyError as e:
            raise RepositoryError(f"{type(self).__name__}: {e}") from e
