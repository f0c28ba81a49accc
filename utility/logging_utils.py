# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-07
# Updated: 2026-02-02
# Description: logging_utils.py
# -----------------------------------------------------------------------------
"""
Package logging.

Every module logger lives under one root, "navigate_ai", and carries no
handlers of its own. The root gets a colour console handler and (unless
NAV_LOG_TO_FILE is off) a rotating file handler the first time any logger is
requested, so the ingestion job, the API and the tests share one setup.

Env:
  NAV_LOG_LEVEL         DEBUG / INFO / WARNING ... (default INFO)
  NAV_LOG_TO_FILE       1/0 (default 1)
  NAV_LOG_FILE          default ./logs/navigate_ai.log
  NAV_LOG_MAX_BYTES     default 5MB
  NAV_LOG_BACKUP_COUNT  default 5
"""
import logging
import os
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path

import colorlog

BASE_LOGGER_NAME = "navigate_ai"

CONSOLE_FORMAT = "%(log_color)s%(asctime)s %(levelname)-8s%(reset)s %(name)s:%(lineno)d %(message_log_color)s%(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s:%(lineno)d %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_setup_lock = threading.Lock()


def _env_on(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "y", "on")


def _console_handler() -> logging.Handler:
    handler = colorlog.StreamHandler()
    handler.setFormatter(
        colorlog.ColoredFormatter(
            fmt=CONSOLE_FORMAT,
            datefmt=DATE_FORMAT,
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
            secondary_log_colors={
                "message": {"WARNING": "yellow", "ERROR": "light_red", "CRITICAL": "red"},
            },
        )
    )
    return handler


def _file_handler(path: Path) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(path),
        maxBytes=int(os.getenv("NAV_LOG_MAX_BYTES", str(5 * 1024 * 1024))),
        backupCount=int(os.getenv("NAV_LOG_BACKUP_COUNT", "5")),
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def configure_logging() -> logging.Logger:
    """Attach handlers to the package root logger. Safe to call repeatedly."""
    root = logging.getLogger(BASE_LOGGER_NAME)
    with _setup_lock:
        if root.handlers:
            return root

        root.addHandler(_console_handler())
        if _env_on("NAV_LOG_TO_FILE", "1"):
            root.addHandler(_file_handler(Path(os.getenv("NAV_LOG_FILE", "./logs/navigate_ai.log"))))

        level_name = os.getenv("NAV_LOG_LEVEL", "INFO").upper()
        root.setLevel(getattr(logging, level_name, logging.INFO))
        # uvicorn / basicConfig root handlers would print everything twice
        root.propagate = False
    return root


def get_logger(name: str | None = None) -> logging.Logger:
    """Module-level logger, e.g. navigate_ai.health.StoreHealth"""
    configure_logging()
    return logging.getLogger(f"{BASE_LOGGER_NAME}.{name}" if name else BASE_LOGGER_NAME)


def get_class_logger(cls: type) -> logging.Logger:
    """
    Logger named after module + class, e.g.:

      navigate_ai.vectorstore.JsonEntityVectorStore.JsonEntityVectorStore
      navigate_ai.services.EntityIngestService.EntityIngestService
    """
    module = getattr(cls, "__module__", "unknown_module")
    classname = getattr(cls, "__name__", "UnknownClass")
    return get_logger(f"{module}.{classname}")
