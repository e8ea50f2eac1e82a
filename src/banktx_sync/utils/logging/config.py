"""
Root logger setup for banktx-sync.

``setup_logging`` replaces any handlers already on the root logger, so the
CLI and tests can call it repeatedly.
"""

import logging
import logging.handlers
import os
import sys

from .formatters import DATE_FORMAT, LINE_FORMAT, ConsoleFormatter, JSONFormatter

TRUTHY = ("true", "1", "yes")

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("opentelemetry",)


def _build_formatter(json_format: bool, app_name: str, for_console: bool) -> logging.Formatter:
    if json_format:
        return JSONFormatter(app_name=app_name)
    if for_console:
        return ConsoleFormatter(use_colors=True)
    return logging.Formatter(fmt=LINE_FORMAT, datefmt=DATE_FORMAT)


def _rotating_file_handler(path: str, max_bytes: int, backup_count: int) -> logging.Handler:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    return logging.handlers.RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    console_output: bool = True,
    json_format: bool = False,
    app_name: str = "banktx-sync",
    max_bytes: int = 20 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """
    Install console and/or rotating-file handlers on the root logger.

    Args:
        level: Level name; unknown names fall back to INFO
        log_file: Rotating log file path, or None for no file output
        console_output: Log to stderr
        json_format: One JSON document per line instead of plain text
        app_name: Value of the ``app`` key in JSON output
        max_bytes: Size at which the log file rotates
        backup_count: Rotated files kept
    """
    threshold = logging.getLevelName(level.upper())
    if not isinstance(threshold, int):
        threshold = logging.INFO

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
        existing.close()
    root.setLevel(threshold)

    handlers = []
    if console_output:
        stream = logging.StreamHandler(sys.stderr)
        stream.setFormatter(_build_formatter(json_format, app_name, for_console=True))
        handlers.append(stream)
    if log_file:
        rotating = _rotating_file_handler(log_file, max_bytes, backup_count)
        rotating.setFormatter(_build_formatter(json_format, app_name, for_console=False))
        handlers.append(rotating)

    for handler in handlers:
        handler.setLevel(threshold)
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        "Logging ready (level=%s, file=%s, json=%s)", level, log_file or "none", json_format
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in TRUTHY


def configure_from_env() -> None:
    """
    Call ``setup_logging`` with values from LOG_LEVEL, LOG_FILE, LOG_JSON
    and LOG_CONSOLE.
    """
    setup_logging(
        level=os.getenv("LOG_LEVEL", "INFO"),
        log_file=os.getenv("LOG_FILE"),
        console_output=_env_flag("LOG_CONSOLE", "true"),
        json_format=_env_flag("LOG_JSON", "false"),
    )
