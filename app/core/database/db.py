import logging
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker

from app.core.config import Settings
from shared import trigram

logger = logging.getLogger(__name__)


def install_sqlite_functions(engine: AsyncEngine) -> None:
    """
    Register pg_trgm's ``similarity`` on every new SQLite connection so the
    search SQL runs unchanged on SQLite (tests, local runs).
    """
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _register(dbapi_connection, connection_record):
        dbapi_connection.create_function("similarity", 2, trigram.similarity)


def create_engine(settings: Settings) -> AsyncEngine:
    url = settings.database_url  # postgresql+asyncpg://... in production
    kwargs = {"echo": settings.debug, "future": True}
    if not url.startswith("sqlite"):
        kwargs["pool_pre_ping"] = settings.db_pool_pre_ping
    engine = create_async_engine(url, **kwargs)
    install_sqlite_functions(engine)
    logger.info("database engine created for dialect %s", engine.dialect.name)
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    """One session per request, from the factory the app lifespan stored on app.state."""
    async with request.app.state.session_factory() as session:
        yield session
