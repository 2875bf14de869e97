"""
Logging configuration for the catalog services.

Called once from the application lifespan; every module logs through
``logging.getLogger(__name__)``.
"""

import logging
import logging.config

from app.core.config import settings


def configure_logging(level: str | None = None) -> None:
    """Install a single stderr handler for the app and quiet noisy libraries."""
    level = (level or settings.log_level).upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                },
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": "ext://sys.stderr",
                },
            },
            "root": {"handlers": ["stderr"], "level": level},
            "loggers": {
                # SQL echo is controlled by settings.debug on the engine
                "sqlalchemy.engine": {"level": "WARNING"},
                "uvicorn.access": {"level": "WARNING"},
            },
        }
    )
    logging.getLogger(__name__).debug("logging configured at %s", level)
