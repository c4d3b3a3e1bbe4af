"""Utility modules for the Meeting Notifier."""

from .exceptions import (
    NotifierError,
    NotifierConfigError,
    TelegramAPIError,
    TelegramAuthError,
    TelegramRejectedError
)
from .retry import retry_with_backoff
from .logging import setup_logging, get_logger, LineFormatter, LoggerAdapter

__all__ = [
    'NotifierError',
    'NotifierConfigError',
    'TelegramAPIError',
    'TelegramAuthError',
    'TelegramRejectedError',
    'retry_with_backoff',
    'setup_logging',
    'get_logger',
    'LineFormatter',
    'LoggerAdapter'
]
