"""
Context-carrying logger for per-table and per-day log lines.
"""

import logging
from typing import Any


class ContextLogger:
    """
    Wrap a stdlib logger and pass bound fields as ``extra`` on every call.

    Keyword arguments given to a logging call are merged over the bound
    fields for that record only:

        log = ContextLogger(__name__, table="banktx")
        day_log = log.bind(day="2017-05-22")
        day_log.info("Day reconciled", operations=6)
    """

    def __init__(self, name: str, **context):
        self.logger = logging.getLogger(name)
        self.context = dict(context)

    def bind(self, **context) -> "ContextLogger":
        """Return a new ContextLogger with ``context`` layered over this one."""
        return ContextLogger(self.logger.name, **{**self.context, **context})

    def get_context(self) -> dict[str, Any]:
        return dict(self.context)

    def log(self, level: int, msg: str, *args, exc_info=None, **fields) -> None:
        if self.logger.isEnabledFor(level):
            self.logger.log(level, msg, *args, exc_info=exc_info, extra={**self.context, **fields})

    def debug(self, msg: str, *args, **fields) -> None:
        self.log(logging.DEBUG, msg, *args, **fields)

    def info(self, msg: str, *args, **fields) -> None:
        self.log(logging.INFO, msg, *args, **fields)

    def warning(self, msg: str, *args, **fields) -> None:
        self.log(logging.WARNING, msg, *args, **fields)

    def error(self, msg: str, *args, **fields) -> None:
        self.log(logging.ERROR, msg, *args, **fields)
