"""Application logging utilities.

Goals:
- Single, shared app logger used everywhere
- Logs written to per-module files under ./logs/ (or $INSIDER_FILINGS_LOG_DIR)
- UTC timestamp at start of each log line
- Daily log rotation

Implementation notes:
- Uses `TimedRotatingFileHandler` with `when='midnight'` and `utc=True`.
- Also attaches a console handler (stderr) for local development.
- Call `get_logger(__name__)` from any module to get a child logger.
"""

from __future__ import annotations

import logging
import os
import time
from logging.handlers import TimedRotatingFileHandler


class _UTCFormatter(logging.Formatter):
    """Formatter that forces UTC timestamps."""

    converter = staticmethod(time.gmtime)


_APP_LOGGER_NAME = "insider_filings"

_LOG_FORMAT = "%(asctime)sZ %(levelname)s pid=%(process)d %(name)s: %(message)s"
_LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"


def _logs_dir() -> str:
    override = os.getenv("INSIDER_FILINGS_LOG_DIR")
    if override and override.strip():
        return override.strip()
    # project_root/logs
    here = os.path.dirname(__file__)
    return os.path.join(here, "logs")


def _sanitize_filename(name: str) -> str:
    # Convert e.g. "api.routes" -> "api_routes"
    name = (name or "app").strip() or "app"
    return "".join(ch if (ch.isalnum() or ch in {"-", "_"}) else "_" for ch in name)


def _formatter() -> logging.Formatter:
    return _UTCFormatter(fmt=_LOG_FORMAT, datefmt=_LOG_DATEFMT)


def _file_handler(file_name: str, level: int) -> TimedRotatingFileHandler:
    os.makedirs(_logs_dir(), exist_ok=True)
    fh = TimedRotatingFileHandler(
        os.path.join(_logs_dir(), file_name),
        when="midnight",
        interval=1,
        backupCount=14,
        utc=True,
        encoding="utf-8",
    )
    fh.setLevel(level)
    fh.setFormatter(_formatter())
    return fh


def configure_app_logging(level_name: str = "INFO") -> logging.Logger:
    """Configure and return the root application logger.

    Safe to call multiple times.
    """

    level = getattr(logging, (level_name or "INFO").upper(), logging.INFO)
    app_logger = logging.getLogger(_APP_LOGGER_NAME)
    app_logger.setLevel(level)

    # Avoid duplicate handlers.
    if getattr(app_logger, "_configured", False):
        return app_logger

    # Console handler
    sh = logging.StreamHandler()
    sh.setLevel(level)
    sh.setFormatter(_formatter())

    app_logger.addHandler(sh)
    app_logger.addHandler(_file_handler("app.log", level))

    # Do not propagate to the global root logger (prevents double logging).
    app_logger.propagate = False

    app_logger._configured = True  # type: ignore[attr-defined]
    return app_logger


def get_logger(module_name: str | None = None) -> logging.Logger:
    """Get a module-specific logger that writes to its own log file.

    Example:
        logger = get_logger(__name__)
    """

    base = configure_app_logging(os.getenv("LOG_LEVEL", "INFO"))

    child_name = module_name or "app"
    logger = logging.getLogger(f"{_APP_LOGGER_NAME}.{child_name}")

    # Ensure the child has a per-file handler (only once).
    if not getattr(logger, "_file_configured", False):
        logger.setLevel(base.level)
        # Child records also reach the shared console/app.log handlers.
        logger.propagate = True
        logger.addHandler(
            _file_handler(_sanitize_filename(child_name) + ".log", base.level)
        )
        logger._file_configured = True  # type: ignore[attr-defined]

    return logger
