"""Structured logging helpers with request trace identifiers.

Module-level loggers carry a ``NullHandler`` so importing the library never
configures logging for the host application. Applications opt in with
:func:`setup_logging`, which installs :class:`JsonFormatter` on the root logger.

The trace id lives in a :class:`contextvars.ContextVar` and is only ever used
to enrich log records. Problem documents take their trace id from the
explicit :class:`~problem_results.problem_details.RequestInfo` instead.

Examples
--------
>>> from problem_results.logging import get_logger, with_fields
>>> logger = get_logger(__name__)
>>> with with_fields(logger, trace_id="req-123", operation="dispatch") as log:
...     log.info("Problem rendered", extra={"status": "success"})
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
from contextlib import AbstractContextManager
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Self

if TYPE_CHECKING:
    from collections.abc import Mapping, MutableMapping
    from types import TracebackType

    from problem_results.types import JsonValue

__all__ = [
    "JsonFormatter",
    "LoggerAdapter",
    "TraceContext",
    "get_logger",
    "get_trace_id",
    "set_trace_id",
    "setup_logging",
    "with_fields",
]

_trace_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "problem_results_trace_id", default=None
)

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRIBUTES = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)


def _timestamp(created: float) -> str:
    stamp = datetime.fromtimestamp(created, tz=UTC).strftime("%Y-%m-%dT%H:%M:%S.%f")
    return stamp[:-3] + "Z"


class JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON documents.

    The output carries ``ts``, ``level``, ``name`` and ``message`` plus every
    JSON-compatible field passed through ``extra``. When the record has no
    ``trace_id`` the current context value is used.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format ``record`` as JSON.

        Parameters
        ----------
        record : logging.LogRecord
            Record to format.

        Returns
        -------
        str
            JSON-encoded log entry.
        """
        data: dict[str, JsonValue] = {
            "ts": _timestamp(record.created),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if (
                key not in _RESERVED_ATTRIBUTES
                and key not in data
                and not key.startswith("_")
                and value is not None
                and isinstance(value, (str, int, float, bool, list, dict))
            ):
                data[key] = value

        if "trace_id" not in data:
            ctx_trace_id = _trace_id.get()
            if ctx_trace_id is not None:
                data["trace_id"] = ctx_trace_id

        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(data, default=str)


class LoggerAdapter(logging.LoggerAdapter[logging.Logger]):
    """Logger adapter that injects structured context fields.

    Bound fields (from the constructor or :func:`with_fields`) are merged into
    each call's ``extra`` without overwriting keys the caller supplied. The
    current trace id is injected when present, and ``operation``/``status``
    always exist so downstream log queries can rely on them.
    """

    def process(
        self, msg: object, kwargs: MutableMapping[str, Any]
    ) -> tuple[object, MutableMapping[str, Any]]:
        """Merge bound fields and the context trace id into ``kwargs['extra']``.

        Parameters
        ----------
        msg : object
            Log message.
        kwargs : MutableMapping[str, Any]
            Keyword arguments of the logging call.

        Returns
        -------
        tuple[object, MutableMapping[str, Any]]
            The message and the updated keyword arguments.
        """
        extra = kwargs.get("extra")
        if not isinstance(extra, dict):
            extra = {}
        if self.extra:
            for key, value in self.extra.items():
                extra.setdefault(key, value)

        if "trace_id" not in extra:
            ctx_trace_id = _trace_id.get()
            if ctx_trace_id is not None:
                extra["trace_id"] = ctx_trace_id

        extra.setdefault("operation", "unknown")
        kwargs["extra"] = extra
        return msg, kwargs

    def log(self, level: int, msg: object, *args: object, **kwargs: Any) -> None:
        """Log ``msg`` at ``level``, inferring ``status`` from the level."""
        extra = kwargs.get("extra")
        if not isinstance(extra, dict):
            extra = {}
        if "status" not in extra:
            if level >= logging.ERROR:
                extra["status"] = "error"
            elif level >= logging.WARNING:
                extra["status"] = "warning"
            else:
                extra["status"] = "success"
        kwargs["extra"] = extra
        super().log(level, msg, *args, **kwargs)

    def debug(self, msg: object, *args: object, **kwargs: Any) -> None:
        """Log a debug message with structured fields."""
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: object, *args: object, **kwargs: Any) -> None:
        """Log an info message with structured fields."""
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: object, *args: object, **kwargs: Any) -> None:
        """Log a warning message with structured fields."""
        self.log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: object, *args: object, **kwargs: Any) -> None:
        """Log an error message with structured fields."""
        self.log(logging.ERROR, msg, *args, **kwargs)

    def exception(
        self, msg: object, *args: object, exc_info: Any = True, **kwargs: Any
    ) -> None:
        """Log an error with traceback using structured fields."""
        self.log(logging.ERROR, msg, *args, exc_info=exc_info, **kwargs)

    def critical(self, msg: object, *args: object, **kwargs: Any) -> None:
        """Log a critical message with structured fields."""
        self.log(logging.CRITICAL, msg, *args, **kwargs)


def get_logger(name: str) -> LoggerAdapter:
    """Return a structured logger adapter for ``name``.

    Parameters
    ----------
    name : str
        Logger name, usually ``__name__``.

    Returns
    -------
    LoggerAdapter
        Adapter wrapping :func:`logging.getLogger` ``(name)``.
    """
    logger = logging.getLogger(name)

    # Libraries must not emit "No handlers could be found" noise.
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    return LoggerAdapter(logger, {})


def setup_logging(level: int | str = logging.INFO) -> None:
    """Configure the root logger to emit JSON lines on stdout.

    Parameters
    ----------
    level : int | str, optional
        Logging threshold, either numeric or a level name such as ``"DEBUG"``.
        Defaults to ``logging.INFO``.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    resolved = level.upper() if isinstance(level, str) else level
    logging.basicConfig(level=resolved, handlers=[handler], force=True)


def set_trace_id(trace_id: str | None) -> None:
    """Set the trace id injected into log records of the current context."""
    _trace_id.set(trace_id)


def get_trace_id() -> str | None:
    """Return the trace id of the current context, if any."""
    return _trace_id.get()


class TraceContext:
    """Context manager binding a trace id for the duration of a block.

    The previous value is restored on exit, so nested requests or tasks never
    leak their identifier into each other.

    Parameters
    ----------
    trace_id : str | None
        Trace id to bind, or ``None`` to clear it inside the block.
    """

    def __init__(self, trace_id: str | None) -> None:
        self.trace_id = trace_id
        self._token: contextvars.Token[str | None] | None = None

    def __enter__(self) -> Self:
        self._token = _trace_id.set(self.trace_id)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._token is not None:
            _trace_id.reset(self._token)
        del exc_type, exc_val, exc_tb


class _WithFieldsContext(AbstractContextManager[LoggerAdapter]):
    """Context manager implementation for :func:`with_fields`."""

    def __init__(
        self, logger: logging.Logger | LoggerAdapter, fields: Mapping[str, object]
    ) -> None:
        self._logger = logger
        self._fields = dict(fields)
        self._token: contextvars.Token[str | None] | None = None

    def __enter__(self) -> LoggerAdapter:
        base_logger = (
            self._logger.logger if isinstance(self._logger, LoggerAdapter) else self._logger
        )
        trace_id = self._fields.get("trace_id")
        if isinstance(trace_id, str):
            self._token = _trace_id.set(trace_id)
        return LoggerAdapter(base_logger, dict(self._fields))

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._token is not None:
            _trace_id.reset(self._token)
        del exc_type, exc_value, exc_tb


def with_fields(
    logger: logging.Logger | LoggerAdapter,
    **fields: object,
) -> AbstractContextManager[LoggerAdapter]:
    """Bind structured fields to every log call made inside the block.

    A ``trace_id`` field is also published to the context variable so
    formatters pick it up for records emitted by other loggers.

    Parameters
    ----------
    logger : logging.Logger | LoggerAdapter
        Logger to wrap.
    **fields : object
        Fields to attach (``trace_id``, ``operation`` ...).

    Returns
    -------
    AbstractContextManager[LoggerAdapter]
        Context manager yielding the bound adapter.
    """
    return _WithFieldsContext(logger, fields)
