"""Logging helpers for querybridge.

Every logger lives under the ``querybridge`` namespace. Executor events such
as ``query.execute.complete`` or ``structure.timeout`` carry their
measurements as structured fields, which :class:`JSONFormatter` writes out as
one JSON object per line.
"""

import logging
import sys
from typing import TYPE_CHECKING, Any, Final, Optional, TextIO, Union

from querybridge.exceptions import ImproperConfigurationError
from querybridge.utils.serializers import to_json

if TYPE_CHECKING:
    from logging import LogRecord

__all__ = (
    "ROOT_LOGGER_NAME",
    "JSONFormatter",
    "configure_logging",
    "get_logger",
    "log_with_context",
)

ROOT_LOGGER_NAME: Final = "querybridge"
FIELDS_ATTRIBUTE: Final = "extra_fields"
TEXT_FORMAT: Final = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _loggable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


class JSONFormatter(logging.Formatter):
    """Format a record as ``{"time", "level", "logger", "event", "fields"}``.

    ``fields`` holds the values passed to :func:`log_with_context`; values
    JSON cannot represent directly (decimals, enums, exceptions) are written
    with ``str()``.
    """

    def format(self, record: "LogRecord") -> str:
        entry: dict[str, Any] = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        fields = getattr(record, FIELDS_ATTRIBUTE, None)
        if fields:
            entry["fields"] = {key: _loggable(value) for key, value in fields.items()}
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return to_json(entry)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return ``querybridge.<name>``, or the package root logger when ``name`` is omitted."""
    if name is None or name == ROOT_LOGGER_NAME:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_logging(
    level: Union[int, str] = "INFO", format_style: str = "json", stream: Optional[TextIO] = None
) -> logging.Handler:
    """Send querybridge records to ``stream`` (stdout by default).

    Handlers installed by an earlier call are replaced, and records stop
    propagating to the application's root logger.

    Args:
        level: Level name or number.
        format_style: ``"json"`` for :class:`JSONFormatter`, ``"text"`` for plain lines.
        stream: Destination stream.

    Raises:
        ImproperConfigurationError: The level or format style is unknown.

    Returns:
        The installed handler.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            msg = f"Unknown log level: {level!r}"
            raise ImproperConfigurationError(msg)
        level = resolved
    if format_style == "json":
        formatter: logging.Formatter = JSONFormatter()
    elif format_style == "text":
        formatter = logging.Formatter(TEXT_FORMAT)
    else:
        msg = f"Unknown log format style: {format_style!r}"
        raise ImproperConfigurationError(msg)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(formatter)
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    root_logger.propagate = False
    return handler


def log_with_context(logger: logging.Logger, level: int, message: str, **extra_fields: Any) -> None:
    """Log ``message`` with ``extra_fields`` attached for :class:`JSONFormatter`.

    Nothing is built when ``level`` is disabled for ``logger``.
    """
    if not logger.isEnabledFor(level):
        return
    logger.log(level, message, extra={FIELDS_ATTRIBUTE: extra_fields})
