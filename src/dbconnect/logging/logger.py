"""Logging setup and configuration.

Records are rendered as JSON lines (or plain text for local use) and carry
the request and connection context injected by ``ContextFilter``. Extra
fields whose names suggest credentials are masked before rendering, so a
stray ``extra={"password": ...}`` never reaches a log sink.
"""

from __future__ import annotations

import json
import logging
import logging.config
import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Set

from opentelemetry import trace

REDACTED = "***"

_SENSITIVE_KEY = re.compile(r"pass(word)?|pwd|secret|token|credential|encryption_key", re.IGNORECASE)

# Loggers of the database drivers and SQLAlchemy; chatty at DEBUG
DRIVER_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "pyodbc",
    "oracledb",
    "pymysql",
)

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [connection=%(connection_id)s] %(message)s"


def _reserved_record_keys() -> Set[str]:
    blank = logging.makeLogRecord({})
    return set(blank.__dict__) | {"asctime", "message"}


_RESERVED_LOG_RECORD_KEYS = _reserved_record_keys()


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def redact(value: Any, key: Optional[str] = None) -> Any:
    """Mask values stored under credential-like keys, recursing into containers."""
    if key is not None and _SENSITIVE_KEY.search(key):
        return REDACTED if value not in (None, "") else value
    if isinstance(value, dict):
        return {k: redact(v, str(k)) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [redact(item) for item in value]
    return value


def _trace_fields() -> Dict[str, str]:
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return {}
    return {
        "trace_id": format(span_context.trace_id, "032x"),
        "span_id": format(span_context.span_id, "016x"),
    }


class CustomJsonFormatter(logging.Formatter):
    """Render a record as one JSON object.

    Standard ``LogRecord`` attributes are dropped except for the level,
    logger name and message; everything passed through ``extra`` (and the
    context fields) is kept, with credential-like keys masked.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_record: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in _RESERVED_LOG_RECORD_KEYS or key in log_record:
                continue
            log_record[key] = redact(value, key)

        log_record.update(_trace_fields())

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str)


def _quiet_drivers(level: str, names: Iterable[str] = DRIVER_LOGGERS) -> Dict[str, Any]:
    return {name: {"level": level, "propagate": True} for name in names}


def setup_logging(
    level: Optional[str] = None,
    fmt: Optional[str] = None,
    driver_level: Optional[str] = None,
) -> None:
    """Configure root logging via ``logging.config.dictConfig``.

    Omitted arguments fall back to the ``DBCONNECT_LOG_*`` settings. The
    deployment environment (``DBCONNECT_APP_ENV``) is attached to every
    record.

    Args:
        level: Root log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        fmt: ``json`` or ``text``
        driver_level: Level for SQLAlchemy and driver loggers
    """
    from dbconnect.logging.filters import set_logging_context
    from dbconnect.settings import get_settings

    settings = get_settings()
    level = (level or settings.log_level).upper()
    fmt = (fmt or settings.log_format).lower()
    driver_level = (driver_level or settings.log_driver_level).upper()

    if fmt == "json":
        formatter: Dict[str, Any] = {"()": "dbconnect.logging.logger.CustomJsonFormatter"}
    elif fmt == "text":
        formatter = {"format": _TEXT_FORMAT}
    else:
        raise ValueError(f"Unknown log format '{fmt}'")

    set_logging_context(environment=settings.app_env)

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"dbconnect": formatter},
        "filters": {
            "dbconnect_context": {
                "()": "dbconnect.logging.filters.ContextFilter",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "dbconnect",
                "filters": ["dbconnect_context"],
                "stream": "ext://sys.stdout",
            }
        },
        "loggers": _quiet_drivers(driver_level),
        "root": {
            "level": level,
            "handlers": ["console"],
        },
    })
