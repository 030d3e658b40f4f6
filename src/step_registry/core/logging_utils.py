"""Helper functions for logging progress and producing timestamps."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from logging.config import dictConfig


def _dict_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": "%(asctime)s %(levelname)s:%(name)s:%(message)s"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "loggers": {
            "step_registry": {"level": level, "handlers": ["console"], "propagate": False},
        },
    }


def configure_logging(level: str = "INFO") -> None:
    """Attach a stdout handler to the ``step_registry`` logger once.

    Calling it again only adjusts the level, so repeated imports of a
    step module do not duplicate output.
    """
    logger = logging.getLogger("step_registry")
    if logger.handlers:
        logger.setLevel(level)
        return
    dictConfig(_dict_config(level))


def now_ts() -> str:
    """Return the current UTC timestamp in ISO format."""

    return datetime.now(timezone.utc).isoformat()
