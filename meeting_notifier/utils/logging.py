"""Logging configuration for the Meeting Notifier."""

import os
import json
import logging
from logging.handlers import RotatingFileHandler
from typing import Optional, Dict, Any

LOGGER_NAME = 'meeting-notifier'

class LineFormatter(logging.Formatter):
    """
    Formatter producing ``<time> <LEVEL>: <message>`` lines.

    Dict messages are serialised as JSON. Context attached through
    :class:`LoggerAdapter` and the formatter's static fields is appended as
    ``key=value`` pairs.
    """
    def __init__(self, **kwargs):
        """Initialize formatter with optional static fields."""
        self.additional_fields = kwargs
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        if isinstance(record.msg, dict):
            message = json.dumps(record.msg, default=str)
        else:
            message = record.getMessage()

        context = dict(self.additional_fields)
        context.update(getattr(record, 'context', None) or {})
        if context:
            pairs = ' '.join(f"{key}={value}" for key, value in context.items())
            message = f"{message} [{pairs}]"

        line = f"{self.formatTime(record)} {record.levelname}: {message}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line

def setup_logging(
    log_dir: str,
    log_file: str,
    level: int = logging.INFO,
    max_bytes: int = 1_000_000,
    backup_count: int = 5,
    add_console_handler: bool = True,
    additional_fields: Optional[Dict[str, Any]] = None
) -> logging.Logger:
    """
    Set up application logging with file rotation and optional console output.

    Handlers are attached to the ``meeting-notifier`` logger and to the
    ``solar_schedule`` and ``meeting_notifier`` package loggers, so module
    loggers created with ``logging.getLogger(__name__)`` end up in the same file.
    Calling it again replaces the handlers instead of stacking them.

    Args:
        log_dir: Directory to store log files
        log_file: Name of the log file
        level: Logging level
        max_bytes: Maximum size of each log file
        backup_count: Number of backup files to keep
        add_console_handler: Whether to add a console handler
        additional_fields: Static fields appended to every line

    Returns:
        Configured application logger
    """
    os.makedirs(log_dir, exist_ok=True)

    formatter = LineFormatter(**(additional_fields or {}))

    handlers = []
    file_handler = RotatingFileHandler(
        os.path.join(log_dir, log_file),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding='utf-8'
    )
    file_handler.setFormatter(formatter)
    handlers.append(file_handler)

    if add_console_handler:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    for name in (LOGGER_NAME, 'solar_schedule', 'meeting_notifier'):
        logger = logging.getLogger(name)
        logger.setLevel(level)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        for handler in handlers:
            logger.addHandler(handler)
        logger.propagate = False

    return logging.getLogger(LOGGER_NAME)

class LoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that allows adding context to log messages.
    """
    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = kwargs.setdefault('extra', {})
        context = dict(self.extra)
        context.update(extra.get('context', {}))
        extra['context'] = context
        return msg, kwargs

def get_logger(
    name: str,
    context: Optional[Dict[str, Any]] = None
) -> LoggerAdapter:
    """
    Get a logger with optional context information.

    Args:
        name: Logger name
        context: Additional context to include in log entries

    Returns:
        Logger adapter instance
    """
    logger = logging.getLogger(name)
    return LoggerAdapter(logger, context or {})
