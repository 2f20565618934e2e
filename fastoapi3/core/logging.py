"""Logging setup applied by ``fastoapi3.default()``."""

import logging
from logging.config import dictConfig

from .settings import get_settings


def build_logging_config(level: str) -> dict:
    """dictConfig sending every record to stderr at ``level``."""

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "engine": {
                "format": "%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S",
            },
        },
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "formatter": "engine",
                "stream": "ext://sys.stderr",
            },
        },
        "root": {"level": level.upper(), "handlers": ["stderr"]},
    }


def configure_logging(level: str | None = None) -> None:
    """Configure logging at ``level`` or the ``LOG_LEVEL`` setting."""

    config = build_logging_config(level or get_settings().log_level)
    dictConfig(config)
    logging.getLogger(__name__).debug("Logging configured at %s", config["root"]["level"])
