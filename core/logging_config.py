# =============================================================================
# USERHUB BACKEND - LOGGING CONFIGURATION
# =============================================================================
# File: core/logging_config.py
# Description: Root logger setup: console output plus daily rotating
#              combined/error files, text or JSON lines
# =============================================================================

import json
import logging
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.config import Settings


TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Marker so repeated configuration replaces only our own handlers
_HANDLER_FLAG = "_userhub_handler"

# Set per request by RequestIDMiddleware
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDFilter(logging.Filter):
    """Attach the current request id to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class JSONFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", None)
        if request_id:
            entry["request_id"] = request_id
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def _build_formatter(settings: Settings) -> logging.Formatter:
    if settings.log_format == "json":
        return JSONFormatter()
    return logging.Formatter(TEXT_FORMAT)


def _rotating_handler(path: Path, level: int, settings: Settings) -> logging.Handler:
    handler = TimedRotatingFileHandler(
        path,
        when="midnight",
        backupCount=settings.log_retention_days,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def configure_logging(settings: Settings) -> None:
    """
    Configure the root logger from settings.

    Installs a console handler and, when ``log_to_file`` is set, a
    ``combined.log`` (INFO+) and an ``error.log`` (ERROR+) that rotate at
    midnight and keep ``log_retention_days`` old files. Safe to call more
    than once.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            root.removeHandler(handler)
            handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if settings.log_to_file:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(_rotating_handler(log_dir / "combined.log", logging.INFO, settings))
        handlers.append(_rotating_handler(log_dir / "error.log", logging.ERROR, settings))

    formatter = _build_formatter(settings)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(RequestIDFilter())
        setattr(handler, _HANDLER_FLAG, True)
        root.addHandler(handler)
