"""Logging configuration for uvicorn that reuses json2db's root logger."""

import logging
from typing import Any

from json2db.logger import ENV_LOG_LEVEL


def get_uvicorn_logging_config() -> dict[str, Any]:
    """
    Generate a uvicorn logging configuration whose loggers define no handlers
    of their own and propagate to the root logger set up by json2db.logger.
    """
    level = logging.getLevelName(ENV_LOG_LEVEL)
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "incremental": False,
        "formatters": {},
        "handlers": {},
        "loggers": {
            name: {"handlers": [], "level": level, "propagate": True}
            for name in ("uvicorn", "uvicorn.error", "uvicorn.access")
        },
    }


LOGGING_CONFIG = get_uvicorn_logging_config()
