"""Configuration module for the Meeting Notifier."""

from .configuration import (
    ConfigManager,
    LoggingConfig,
    ScheduleConfig,
    TelegramConfig,
    load_rules,
    rule_from_dict,
)

__all__ = [
    'ConfigManager',
    'LoggingConfig',
    'ScheduleConfig',
    'TelegramConfig',
    'load_rules',
    'rule_from_dict',
]
