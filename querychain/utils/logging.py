"""Logging helpers for querychain.

Every logger lives under the ``querychain`` namespace. Statement execution runs
inside a correlation scope, so all records emitted while one ``exec()``,
``count()`` or ``paginate()`` call is in flight carry the same id.
"""

import logging
import sys
import uuid
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Optional, Union

from querychain._serialization import encode_json

__all__ = (
    "ROOT_LOGGER_NAME",
    "CorrelationIDFilter",
    "StructuredFormatter",
    "configure_logging",
    "correlation_scope",
    "get_correlation_id",
    "get_logger",
)

ROOT_LOGGER_NAME = "querychain"
TEXT_FORMAT = "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"
NO_CORRELATION_ID = "-"

_correlation_id: ContextVar[Optional[str]] = ContextVar("querychain_correlation_id", default=None)


def get_correlation_id() -> Optional[str]:
    """Return the correlation id bound to the current context, if any."""
    return _correlation_id.get()


@contextmanager
def correlation_scope(correlation_id: Optional[str] = None) -> Iterator[str]:
    """Bind a correlation id for the duration of the block.

    Without an explicit id, an id bound by an enclosing scope is reused and a
    fresh one is generated otherwise. The previous binding is restored on exit.

    Args:
        correlation_id: Id to bind, e.g. the caller's request id.

    Yields:
        str: The id in effect inside the block.
    """
    current = _correlation_id.get()
    if correlation_id is None and current is not None:
        yield current
        return
    value = correlation_id or uuid.uuid4().hex
    token = _correlation_id.set(value)
    try:
        yield value
    finally:
        _correlation_id.reset(token)


class CorrelationIDFilter(logging.Filter):
    """Stamp each record with the current correlation id, or ``-`` outside a scope."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return True


class StructuredFormatter(logging.Formatter):
    """Render records as one JSON object per line.

    The ``extra_fields`` mapping the builders pass through ``extra=`` is merged
    into the top level of the object.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        correlation_id = getattr(record, "correlation_id", None) or get_correlation_id()
        if correlation_id and correlation_id != NO_CORRELATION_ID:
            entry["correlation_id"] = correlation_id
        entry.update(getattr(record, "extra_fields", {}))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return encode_json(entry)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the ``querychain`` namespace.

    Args:
        name: Dotted name below ``querychain``. ``None`` returns the package logger.

    Returns:
        logging.Logger: The logger, with a :class:`CorrelationIDFilter` attached once.
    """
    if name is None or name == ROOT_LOGGER_NAME:
        name = ROOT_LOGGER_NAME
    elif not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    logger = logging.getLogger(name)
    if not any(isinstance(f, CorrelationIDFilter) for f in logger.filters):
        logger.addFilter(CorrelationIDFilter())
    return logger


def configure_logging(
    level: Union[str, int] = "INFO",
    structured: bool = True,
    handlers: Optional[Sequence[logging.Handler]] = None,
) -> logging.Logger:
    """Route querychain records to dedicated handlers.

    Replaces any handlers previously installed on the package logger and stops
    propagation to the root logger.

    Args:
        level: Threshold for the package logger.
        structured: JSON lines when true, plain text otherwise. Only applies to
            handlers that have no formatter yet.
        handlers: Handlers to install. Defaults to one stream handler on stderr.

    Returns:
        logging.Logger: The configured package logger.
    """
    package_logger = get_logger()
    package_logger.setLevel(level.upper() if isinstance(level, str) else level)
    package_logger.handlers.clear()

    for handler in handlers if handlers is not None else [logging.StreamHandler(sys.stderr)]:
        if handler.formatter is None:
            handler.setFormatter(StructuredFormatter() if structured else logging.Formatter(TEXT_FORMAT))
        if not any(isinstance(f, CorrelationIDFilter) for f in handler.filters):
            handler.addFilter(CorrelationIDFilter())
        package_logger.addHandler(handler)

    package_logger.propagate = False
    return package_logger
