import asyncio
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Callable
from uuid import UUID, uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import StorageError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AbstractRepository(ABC):
    """
    Minimal, framework-agnostic repository contract.

    Two variants implement it: the SQL-backed ContentRepository and the
    in-memory fixture store. Callers pick one at construction time.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], UUID] = uuid4,
    ):
        self.clock = clock
        self.id_factory = id_factory

    @abstractmethod
    async def insert(self, payload): ...

    @abstractmethod
    async def update(self, entity_id, payload): ...

    @abstractmethod
    async def delete(self, entity_id) -> None: ...

    @abstractmethod
    async def get(self, entity_id): ...

    @abstractmethod
    async def list(self, page_size=None, page_token=None): ...


@asynccontextmanager
async def transaction(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Commit on success. Any failure, cancellation included, rolls the whole
    unit back before the exception propagates; driver errors surface as
    StorageError.
    """
    try:
        yield db
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise StorageError(str(e)) from e
    except (Exception, asyncio.CancelledError):
        await db.rollback()
        raise


class SQLRepository(AbstractRepository):
    """AbstractRepository bound to one AsyncSession."""

    def __init__(self, db: AsyncSession, **kwargs):
        super().__init__(**kwargs)
        self.db = db

    def transaction(self):
        return transaction(self.db)
