"""
Log formatters for banktx-sync.

JSONFormatter writes one object per line for log shippers. ConsoleFormatter
is for operators at a terminal and appends ``extra`` fields such as the
table, day and operation counts as key=value pairs.
"""

import json
import logging
import socket
import sys
import traceback
from datetime import UTC, datetime

LINE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Present on every LogRecord; any other attribute was passed through ``extra``
_STANDARD_RECORD_FIELDS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


def extract_context(record: logging.LogRecord) -> dict:
    """Return the fields a caller attached to ``record`` via ``extra``."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _STANDARD_RECORD_FIELDS and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """
    Render records as single-line JSON documents.

    Caller-supplied ``extra`` fields are grouped under ``context`` so they
    never collide with the fixed keys.
    """

    def __init__(
        self,
        include_timestamp: bool = True,
        include_hostname: bool = True,
        app_name: str = "banktx-sync",
    ):
        super().__init__()
        self.include_timestamp = include_timestamp
        self.app_name = app_name
        self.hostname = socket.gethostname() if include_hostname else None

    def format(self, record: logging.LogRecord) -> str:
        document = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "app": self.app_name,
            "source": {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            },
        }
        if self.include_timestamp:
            document["timestamp"] = datetime.fromtimestamp(record.created, UTC).isoformat()
        if self.hostname:
            document["hostname"] = self.hostname
        if record.exc_info:
            document["exception"] = self._describe_exception(record.exc_info)

        context = extract_context(record)
        if context:
            document["context"] = context

        return json.dumps(document, default=str)

    @staticmethod
    def _describe_exception(exc_info) -> dict:
        exc_type, exc_value, exc_tb = exc_info
        return {
            "type": exc_type.__name__,
            "message": str(exc_value),
            "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
        }


class ConsoleFormatter(logging.Formatter):
    """Plain-text formatter; colours the level name when stderr is a TTY."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__(fmt=LINE_FORMAT, datefmt=DATE_FORMAT)
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        original = record.levelname
        color = self.LEVEL_COLORS.get(record.levelno) if self.use_colors else None
        if color:
            record.levelname = f"{color}{original}{self.RESET}"
        try:
            line = super().format(record)
        finally:
            record.levelname = original

        context = extract_context(record)
        if not context:
            return line
        return line + " [" + ", ".join(f"{k}={v}" for k, v in context.items()) + "]"
