"""Logging configuration and helpers for the Draco API.

Two output formats are supported:

* human-readable console lines, and
* structured JSON lines for log ingestion.

Request handlers bind a correlation ID with :func:`bind_request_context`, and
authorization code builds its ``extra`` payloads with :func:`log_context` so
account/contact/role identifiers show up under stable keys.
"""

from __future__ import annotations

import json
import logging
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from draco_api.settings import Settings

_CORRELATION_ID: ContextVar[str | None] = ContextVar(
    "draco_api_correlation_id",
    default=None,
)

# Attributes owned by logging itself; never copied into the extra payload.
_STANDARD_ATTRS: set[str] = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "message",
    "asctime",
    "correlation_id",
    "taskName",
    "color_message",
}

_CONFIGURED_FLAG = "_draco_configured"
_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _format_timestamp(record: logging.LogRecord, datefmt: str | None) -> str:
    dt = datetime.fromtimestamp(record.created, tz=UTC)
    return f"{dt.strftime(datefmt or _TIME_FORMAT)}.{int(record.msecs):03d}Z"


class ConsoleLogFormatter(logging.Formatter):
    """Render log records as single-line console output.

    Example line:

        2026-03-02T10:15:00.302Z INFO  draco_api.features.roles.service [cid=-]
        rbac.assign.created account_id=7 contact_id=12 role_id=team-admin
    """

    def __init__(self) -> None:
        fmt = "%(asctime)s %(levelname)-5s %(name)s [cid=%(correlation_id)s] %(message)s"
        super().__init__(fmt=fmt, datefmt=_TIME_FORMAT)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        return _format_timestamp(record, datefmt)

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - std signature
        record.correlation_id = _resolve_correlation_id(record)
        base = super().format(record)
        extras = [
            f"{key}={_format_extra_value(value)}"
            for key, value in sorted(_record_extras(record).items())
        ]
        if extras:
            return f"{base} " + " ".join(extras)
        return base


class JsonLogFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        return _format_timestamp(record, datefmt)

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - std signature
        cid = _resolve_correlation_id(record)
        record.correlation_id = cid
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "service": "draco-api",
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": cid,
        }
        payload.update(_record_extras(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))


def setup_logging(settings: Settings) -> None:
    """Configure root logging for the Draco API process.

    Installs a single StreamHandler on the root logger and routes uvicorn and
    SQLAlchemy loggers through it. SQL traces stay at WARNING unless
    ``DRACO_DATABASE_LOG_LEVEL`` asks for more.
    """
    root_logger = logging.getLogger()
    level = getattr(logging, settings.log_level)

    if not getattr(root_logger, _CONFIGURED_FLAG, False) or not root_logger.handlers:
        root_logger.handlers = [logging.StreamHandler()]
        setattr(root_logger, _CONFIGURED_FLAG, True)
    else:
        root_logger.handlers = [root_logger.handlers[0]]

    root_logger.handlers[0].setFormatter(_build_formatter(settings.log_format))
    root_logger.setLevel(level)

    for name in (
        "uvicorn",
        "uvicorn.error",
        "uvicorn.access",
        "draco_api.request",
        "sqlalchemy",
        "sqlalchemy.engine",
        "sqlalchemy.pool",
    ):
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.propagate = True
        logger.disabled = False
        logger.setLevel(logging.NOTSET)

    logging.getLogger("uvicorn").setLevel(level)
    logging.getLogger("draco_api.request").setLevel(
        getattr(logging, settings.effective_request_log_level)
    )

    db_level = getattr(logging, settings.database_log_level or "WARNING")
    for name in ("sqlalchemy", "sqlalchemy.engine", "sqlalchemy.pool"):
        logging.getLogger(name).setLevel(db_level)


def bind_request_context(correlation_id: str | None) -> None:
    """Bind a correlation ID to the logging context for the current request."""
    _CORRELATION_ID.set(correlation_id)


def clear_request_context() -> None:
    """Clear the request-scoped logging context."""
    _CORRELATION_ID.set(None)


def current_request_id() -> str | None:
    """Return the current request/correlation ID if bound."""
    return _CORRELATION_ID.get()


def log_context(
    *,
    user_id: str | None = None,
    account_id: int | None = None,
    contact_id: int | None = None,
    role_id: str | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build a consistent ``extra`` payload for structured logs.

    Example:
        logger.info(
            "rbac.assign.created",
            extra=log_context(account_id=7, contact_id=12, role_id="team-admin"),
        )
    """
    ctx: dict[str, Any] = {}
    if user_id is not None:
        ctx["user_id"] = str(user_id)
    if account_id is not None:
        ctx["account_id"] = account_id
    if contact_id is not None:
        ctx["contact_id"] = contact_id
    if role_id is not None:
        ctx["role_id"] = role_id
    for key, value in extra.items():
        if value is not None:
            ctx[key] = value
    return ctx


def _resolve_correlation_id(record: logging.LogRecord) -> str:
    return getattr(record, "correlation_id", None) or _CORRELATION_ID.get() or "-"


def _format_extra_value(value: Any) -> str:
    if value is None:
        return "null"
    return str(value)


def _record_extras(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_ATTRS and not key.startswith("_")
    }


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return JsonLogFormatter()
    return ConsoleLogFormatter()


__all__ = [
    "ConsoleLogFormatter",
    "JsonLogFormatter",
    "bind_request_context",
    "clear_request_context",
    "current_request_id",
    "log_context",
    "setup_logging",
]
