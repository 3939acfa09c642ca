"""Process-wide logging setup.

Every module obtains its logger with ``get_logger(__name__)``. The root
logger is configured once, at import time, from environment variables:

    LOG_LEVEL     logging level name (default: INFO)
    LOG_TO_FILE   write a daily-rotated log file as well (default: false)
    LOG_DIR       directory for the log file (default: logs)
"""

import logging
import os
from logging.handlers import TimedRotatingFileHandler

from rich.console import Console
from rich.logging import RichHandler


ENV_LOG_LEVEL_STR = os.getenv("LOG_LEVEL", "INFO").upper()
ENV_LOG_LEVEL = logging.getLevelName(ENV_LOG_LEVEL_STR)
if not isinstance(ENV_LOG_LEVEL, int):
    ENV_LOG_LEVEL = logging.INFO
ENV_LOG_TO_FILE = os.getenv("LOG_TO_FILE", "false").lower() in {"1", "true", "yes"}
ENV_LOG_DIR = os.getenv("LOG_DIR", "logs")

_FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_configured = False


def setup_logging(
    level: int | None = None,
    log_to_file: bool | None = None,
    log_dir: str | None = None,
    when: str = "d",
    backup_count: int = 7,
) -> None:
    """Configure the root logger with a rich console handler.

    Calling it again replaces the handlers installed by a previous call,
    so tests and the server entrypoint can reconfigure freely.
    """
    global _configured
    level = ENV_LOG_LEVEL if level is None else level
    log_to_file = ENV_LOG_TO_FILE if log_to_file is None else log_to_file
    log_dir = log_dir or ENV_LOG_DIR

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        if getattr(handler, "_json2db_handler", False):
            root.removeHandler(handler)

    console_handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
        markup=False,
    )
    console_handler.setLevel(level)
    console_handler._json2db_handler = True  # type: ignore[attr-defined]
    root.addHandler(console_handler)

    if log_to_file:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            os.path.join(log_dir, "json2db.log"),
            when=when,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        file_handler._json2db_handler = True  # type: ignore[attr-defined]
        root.addHandler(file_handler)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger that reports through the json2db root handlers."""
    if not _configured:
        setup_logging()
    return logging.getLogger(name)
