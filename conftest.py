# conftest.py
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import Depends
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.core.database.db import get_session, install_sqlite_functions
from app.core.database.base import Base
from content.adapters.outbound.memory_repository import InMemoryContentRepository
from content.domain.repositories import ContentRepository
from shared import wiring


# ---- Fakes ------------------------------------------------------------------

class TickingClock:
    """Deterministic clock: every call is one second after the previous one."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=1)) -> None:
        self.now = start or datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        self.now = self.now + self.step
        return self.now


class FrozenClock:
    """Clock that never advances (exercises the strictly-later update rule)."""

    def __init__(self, at: datetime | None = None) -> None:
        self.at = at or datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.at


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def frozen_clock() -> FrozenClock:
    return FrozenClock()


# ---- Async engine + session --------------------------------------------------

@pytest_asyncio.fixture(scope="function")
async def async_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    # similarity() must be registered before the first connection is made
    install_sqlite_functions(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()

@pytest_asyncio.fixture(scope="function")
async def SessionMaker(async_engine):
    return async_sessionmaker(bind=async_engine, expire_on_commit=False, class_=AsyncSession)

@pytest_asyncio.fixture
async def db_session(SessionMaker) -> AsyncGenerator[AsyncSession, None]:
    async with SessionMaker() as s:
        yield s

@pytest_asyncio.fixture(scope="function")
async def override_get_session(db_session: AsyncSession):
    """Handlers share the test's session so tests can assert on DB state directly."""
    async def _dep():
        yield db_session
    app.dependency_overrides[get_session] = _dep
    yield
    app.dependency_overrides.pop(get_session, None)

@pytest_asyncio.fixture(scope="function")
async def override_clock(override_get_session, clock: TickingClock):
    """Repositories built per request use the ticking clock, so ordering is deterministic."""
    def _repo(db: AsyncSession = Depends(get_session)):
        return ContentRepository(db, clock=clock)
    app.dependency_overrides[wiring.get_content_repository] = _repo
    yield
    app.dependency_overrides.pop(wiring.get_content_repository, None)


# ---- Repositories ------------------------------------------------------------

@pytest.fixture
def content_repo(db_session: AsyncSession, clock: TickingClock) -> ContentRepository:
    return ContentRepository(db_session, clock=clock)

@pytest.fixture
def memory_repo(clock: TickingClock) -> InMemoryContentRepository:
    return InMemoryContentRepository(clock=clock)


# ---- HTTP client -------------------------------------------------------------

@pytest_asyncio.fixture(scope="function")
async def client(override_clock) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as c:
        yield c
