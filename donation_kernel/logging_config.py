"""
Structured JSON logging for the donation kernel.

Every record under the ``donation_kernel`` logger is written as one JSON
line: timestamp, level, logger, message, the fields bound on
``LogContext`` for the current ledger call, then any ``extra`` fields.
Exceptions add ``exc_type``, ``exc_message``, ``exc_code`` and one
``exc_<attr>`` entry per structured attribute of a DonationKernelError.
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
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

_EMPTY: Mapping[str, str] = MappingProxyType({})
_context: ContextVar[Mapping[str, str]] = ContextVar("donation_log_context", default=_EMPTY)


class LogContext:
    """
    Per-call log fields, isolated per thread and per task.

    The ledger binds one correlation id and the ids it is working on for
    the length of an ``assign`` or ``reverse`` call.
    """

    FIELDS = frozenset({
        "correlation_id",
        "operation",
        "item_id",
        "recipient_id",
        "donation_id",
    })

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[None]:
        """Add fields for the duration of the block; unknown names and None are skipped."""
        merged = dict(_context.get())
        merged.update(
            (name, value)
            for name, value in fields.items()
            if name in LogContext.FIELDS and value is not None
        )
        token = _context.set(MappingProxyType(merged))
        try:
            yield
        finally:
            _context.reset(token)

    @staticmethod
    def get_all() -> dict[str, str]:
        return dict(_context.get())

    @staticmethod
    def clear() -> None:
        _context.set(_EMPTY)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}


class _JSONEncoder(json.JSONEncoder):
    """Dates as ISO strings, enums as their values, anything else via str()."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        return str(obj)


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }

        for key, val in vars(record).items():
            if key not in _STDLIB_KEYS and key not in payload:
                payload[key] = val

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, cls=_JSONEncoder)

    @staticmethod
    def _exception_fields(exc: BaseException) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        code = getattr(exc, "code", None)
        if code is not None:
            fields["exc_code"] = code
        for name, value in vars(exc).items():
            if not name.startswith("_"):
                fields[f"exc_{name}"] = value
        return fields


# ---------------------------------------------------------------------------
# Logger factory and setup
# ---------------------------------------------------------------------------

_ROOT_NAME = "donation_kernel"

_configured = False
_lock = threading.Lock()


def get_logger(name: str) -> logging.Logger:
    """Logger under the donation_kernel namespace, e.g. ``get_logger("bootstrap")``."""
    return logging.getLogger(f"{_ROOT_NAME}.{name}")


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Install one JSON handler on the donation_kernel logger.  Later calls are no-ops."""
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    root = logging.getLogger(_ROOT_NAME)
    root.setLevel(level)
    root.propagate = False

    if handler is None:
        import sys

        handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    root.addHandler(handler)


def reset_logging() -> None:
    """Remove installed handlers so configure_logging runs again.  Tests only."""
    global _configured
    with _lock:
        _configured = False
    root = logging.getLogger(_ROOT_NAME)
    root.handlers.clear()
    root.setLevel(logging.WARNING)
