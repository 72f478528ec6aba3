"""
Structured Logging

JSON log lines for the Skintelect API. Each line carries the service name,
the request context set by the HTTP middleware (request ID, client IP) and
any `extra` fields.

Pasted label text is never written to the logs: fields named in
REDACTED_FIELDS are dropped before formatting. Analyses log counts only.

Configuration (see config.py): LOG_LEVEL, LOG_FORMAT ("json" | "text"),
LOG_OUTPUT ("stdout" | "file" | "all"), LOG_FILE.
"""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict

import config

_request_context: ContextVar[Dict[str, Any]] = ContextVar("request_context", default={})

# Attributes every LogRecord carries; anything else came in through `extra`
_RECORD_ATTRS = set(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime"}

# Ingredient text from the request body
REDACTED_FIELDS = {"text", "raw_text", "ingredient_text"}


class LogContext:
    """
    Attach fields to every log line emitted inside the block.

        with LogContext(request_id="abc", client_ip="10.0.0.1"):
            logger.info("Analyzing")
    """

    def __init__(self, **fields):
        self.fields = fields
        self._token = None

    def __enter__(self):
        self._token = _request_context.set({**_request_context.get(), **self.fields})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _request_context.reset(self._token)
        return False


def get_context() -> Dict[str, Any]:
    return dict(_request_context.get())


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def __init__(self, service_name: str = None):
        super().__init__()
        self.service_name = service_name or config.SERVICE_NAME

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            **get_context(),
        }

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS
            and not key.startswith("_")
            and key not in REDACTED_FIELDS
        }
        if extra:
            entry["extra"] = extra

        if record.levelno >= logging.ERROR:
            entry["source"] = f"{record.pathname}:{record.lineno}"
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


# =============================================================================
# SETUP
# =============================================================================

_configured = False


def configure_logging(level: str = None, format: str = None, output: str = None, log_file: str = None):
    """Install stdout and/or rotating file handlers on the root logger."""
    global _configured

    level = (level or config.LOG_LEVEL).upper()
    format = (format or config.LOG_FORMAT).lower()
    output = (output or config.LOG_OUTPUT).lower()

    if format == "json":
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handlers = []
    if output in ("stdout", "all"):
        handlers.append(logging.StreamHandler(sys.stdout))
    if output in ("file", "all"):
        path = Path(log_file or config.LOG_FILE)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(path, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"))

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(getattr(logging, level, logging.INFO))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    _configured = True


def get_logger(name: str = None) -> logging.Logger:
    if not _configured:
        configure_logging()
    return logging.getLogger(name or "skintelect")


# =============================================================================
# EVENT HELPERS
# =============================================================================

def log_request(method: str, path: str, status_code: int, duration_ms: float, **extra):
    """One line per finished HTTP request; level follows the status code."""
    if status_code >= 500:
        level = logging.ERROR
    elif status_code >= 400:
        level = logging.WARNING
    else:
        level = logging.INFO

    get_logger("http").log(
        level,
        f"{method} {path} {status_code}",
        extra={"http_status": status_code, "duration_ms": round(duration_ms, 2), **extra},
    )


def log_analysis(total: int, recognized: int, duration_ms: float, **extra):
    """Counts for one ingredient analysis. Never pass the pasted text."""
    get_logger("analysis").debug(
        "Ingredient analysis completed",
        extra={
            "ingredient_count": total,
            "recognized_count": recognized,
            "unrecognized_count": total - recognized,
            "duration_ms": round(duration_ms, 2),
            **extra,
        },
    )


def log_security_event(event_type: str, client_ip: str = None, **extra):
    """Rate limit rejections and similar client-abuse signals."""
    get_logger("security").warning(
        "Security event",
        extra={"security_event": event_type, "client_ip": client_ip, **extra},
    )


def generate_request_id() -> str:
    return uuid.uuid4().hex[:12]
