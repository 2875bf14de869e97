import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from sqlalchemy import text

from app.core.config import Settings, settings as default_settings
from app.core.database.db import create_engine, create_session_factory
from app.core.database.base import Base
from app.core.logging import configure_logging

# Routers
from content.routers import contents_router
from discovery.routers import discovery_router

logger = logging.getLogger(__name__)


def create_app(settings: Settings = default_settings) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: dev-friendly table creation (Alembic owns the schema in prod)
        configure_logging(settings.log_level)
        engine = create_engine(settings)
        async with engine.begin() as conn:
            if engine.dialect.name == "postgresql":
                await conn.execute(text("CREATE EXTENSION IF NOT EXISTS pg_trgm"))
            await conn.run_sync(Base.metadata.create_all)
        app.state.engine = engine
        app.state.session_factory = create_session_factory(engine)
        logger.info("%s started", settings.app_name)
        yield
        # Shutdown
        await engine.dispose()
        logger.info("%s stopped", settings.app_name)

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        debug=settings.debug,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    @app.get("/health", tags=["system"])
    async def health():
        return {"status": "ok"}

    # Content management
    app.include_router(contents_router)
    # Discovery
    app.include_router(discovery_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=default_settings.app_host, port=default_settings.app_port)
