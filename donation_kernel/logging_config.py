"""
Structured JSON logging for the donation platform.

Every record under the ``donation_kernel`` namespace is written as one JSON
object per line.  Request-scoped fields (the request id, the acting user,
the operator transaction being processed) live in a ContextVar and are
merged into each record, so they follow a request across threads and
awaits without being passed around.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from uuid import UUID

LOGGER_NAMESPACE = "donation_kernel"

CONTEXT_FIELDS: tuple[str, ...] = (
    "correlation_id",
    "actor_id",
    "request_path",
    "operator_transaction_id",
)

_context: ContextVar[Mapping[str, str]] = ContextVar("donation_log_context", default={})


class LogContext:
    """Request-scoped fields attached to every structured log line."""

    @staticmethod
    def _known(fields: Mapping[str, Any]) -> dict[str, str]:
        return {
            name: str(value)
            for name, value in fields.items()
            if name in CONTEXT_FIELDS and value is not None
        }

    @classmethod
    def set(cls, **fields: str | None) -> None:
        """Merge fields into the current context; None leaves a field alone."""
        _context.set({**_context.get(), **cls._known(fields)})

    @staticmethod
    def get_all() -> dict[str, str]:
        return dict(_context.get())

    @staticmethod
    def clear() -> None:
        _context.set({})

    @classmethod
    @contextmanager
    def bind(cls, **fields: str | None) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a block, then restore the previous context."""
        token = _context.set({**_context.get(), **cls._known(fields)})
        try:
            yield cls
        finally:
            _context.reset(token)


# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS: frozenset[str] = frozenset(
    logging.makeLogRecord({}).__dict__
) | {"message", "asctime", "taskName"}


def _jsonable(value: Any) -> Any:
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # DonationKernelError subclasses keep their identifiers as attributes
    for name, value in vars(exc).items():
        if name.startswith("_") or name in ("args", "code"):
            continue
        fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: timestamp, level, logger, message, context, extras."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "ts": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for name, value in record.__dict__.items():
            if name not in _RECORD_ATTRS:
                payload.setdefault(name, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_jsonable)


def get_logger(name: str) -> logging.Logger:
    """Logger named ``donation_kernel.<name>``."""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


_configured = False
_configure_lock = threading.Lock()


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``donation_kernel`` logger.

    Only the first call has an effect.  Records do not propagate to the
    root logger, so host applications keep their own formatting.
    """
    global _configured
    with _configure_lock:
        if _configured:
            return
        _configured = True

    namespace = logging.getLogger(LOGGER_NAMESPACE)
    namespace.setLevel(level)
    namespace.propagate = False

    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    namespace.addHandler(handler)


def reset_logging() -> None:
    """Drop handlers and allow configure_logging to run again (tests)."""
    global _configured
    with _configure_lock:
        _configured = False
    namespace = logging.getLogger(LOGGER_NAMESPACE)
    namespace.handlers.clear()
    namespace.setLevel(logging.WARNING)
