"""Configuration management for the Meeting Notifier."""

import os
import re
import json
import logging
from typing import Any, Dict, List
from configparser import ConfigParser
from dataclasses import dataclass
from datetime import timedelta

from solar_schedule import GeoPoint, MalformedRuleError, Rule, Schedule
from solar_schedule.models import DEFAULT_LEAD_MINUTES, DEFAULT_OFFSET_MINUTES

from ..utils.exceptions import NotifierConfigError

logger = logging.getLogger(__name__)

DEFAULT_TEXT = "Good morning! This week's meeting starts at {HHMM}, an hour before sunset."

_TOKEN_RE = re.compile(r'^\d+:[A-Za-z0-9_-]+$')
_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

@dataclass
class TelegramConfig:
    """Telegram Bot API settings."""
    bot_token: str
    api_url: str = 'https://api.telegram.org'
    timeout_seconds: float = 10
    retries: int = 3

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.bot_token:
            raise NotifierConfigError(
                "Telegram bot token is required (set BOT_TOKEN or [telegram] bot_token)"
            )
        if not _TOKEN_RE.match(self.bot_token):
            raise NotifierConfigError("Telegram bot token must look like '<id>:<secret>'")
        if not self.api_url.startswith(('http://', 'https://')):
            raise NotifierConfigError(f"api_url must be an http(s) URL, got {self.api_url}")
        self._validate_positive('timeout_seconds')
        self._validate_positive('retries')

    def _validate_positive(self, field_name: str):
        """Validate that a field contains a positive number."""
        value = getattr(self, field_name)
        if value <= 0:
            raise NotifierConfigError(
                f"{field_name} must be positive, got {value}"
            )

@dataclass
class ScheduleConfig:
    """Rule source, dedupe cache and matching settings."""
    rules_file: str
    cache_file: str
    window_minutes: int = 15
    cooldown_hours: float = 12
    default_offset_minutes: int = DEFAULT_OFFSET_MINUTES
    default_lead_minutes: int = DEFAULT_LEAD_MINUTES
    default_text: str = DEFAULT_TEXT

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.window_minutes <= 0:
            raise NotifierConfigError(
                f"window_minutes must be positive, got {self.window_minutes}"
            )
        if self.cooldown_hours * 60 < self.window_minutes:
            raise NotifierConfigError(
                f"cooldown_hours ({self.cooldown_hours}) must cover the "
                f"window ({self.window_minutes} minutes)"
            )
        if '{HHMM}' not in self.default_text:
            raise NotifierConfigError("default_text must contain the {HHMM} placeholder")

    @property
    def window(self) -> timedelta:
        return timedelta(minutes=self.window_minutes)

    @property
    def cooldown(self) -> timedelta:
        return timedelta(hours=self.cooldown_hours)

@dataclass
class LoggingConfig:
    """Log file settings."""
    log_dir: str
    log_file: str = 'meeting-notifier.log'
    level: str = 'INFO'

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.level = self.level.upper()
        if self.level not in _LEVELS:
            raise NotifierConfigError(
                f"level must be one of {', '.join(_LEVELS)}, got {self.level}"
            )

    @property
    def level_number(self) -> int:
        return getattr(logging, self.level)


def rule_from_dict(entry: Dict[str, Any], defaults: ScheduleConfig) -> Rule:
    """
    Build a rule from one entry of the rules file.

    Args:
        entry: Object with ``chat_id``, ``lat``, ``lon``, ``schedule`` and optional
            ``offset_minutes``, ``lead_minutes`` and ``text``
        defaults: Schedule settings supplying the optional values

    Returns:
        Validated rule

    Raises:
        MalformedRuleError: If a field is missing, mistyped or out of range
    """
    if not isinstance(entry, dict):
        raise MalformedRuleError(f"Rule must be an object, got {type(entry).__name__}")

    missing = [key for key in ('chat_id', 'lat', 'lon', 'schedule') if key not in entry]
    if missing:
        raise MalformedRuleError(f"Rule is missing {', '.join(missing)}")

    try:
        location = GeoPoint(float(entry['lat']), float(entry['lon']))
        offset = entry.get('offset_minutes')
        lead = entry.get('lead_minutes')
        offset = defaults.default_offset_minutes if offset is None else _as_int(offset)
        lead = defaults.default_lead_minutes if lead is None else _as_int(lead)
    except (TypeError, ValueError) as e:
        raise MalformedRuleError(f"Rule {entry.get('chat_id')!r} has an invalid number: {e}")

    text = entry.get('text') or defaults.default_text
    if not isinstance(text, str):
        raise MalformedRuleError(f"Rule {entry['chat_id']!r} text must be a string, got {type(text).__name__}")
    if '{HHMM}' not in text:
        logger.warning(f"Rule {entry['chat_id']} text has no {{HHMM}} placeholder")

    return Rule(
        identity=str(entry['chat_id']),
        location=location,
        schedule=Schedule.parse(entry['schedule']),
        utc_offset_minutes=offset,
        lead_minutes=lead,
        text=text,
    )


def _as_int(value: Any) -> int:
    # Reject 180.5 and True rather than silently truncating them
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValueError(f"expected a whole number, got {value!r}")
    return int(value)


def load_rules(path: str, defaults: ScheduleConfig) -> List[Rule]:
    """
    Load rules from a JSON file.

    Malformed entries are logged and skipped so that one bad rule does not stop
    the others.

    Args:
        path: Path to a JSON array of rule objects
        defaults: Schedule settings supplying optional values

    Returns:
        Rules in file order

    Raises:
        NotifierConfigError: If the file is missing, unreadable or not a JSON array
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise NotifierConfigError(f"Rules file not found: {path}")
    except (OSError, ValueError) as e:
        raise NotifierConfigError(f"Could not read rules file {path}: {e}")

    if not isinstance(data, list):
        raise NotifierConfigError(f"Rules file {path} must contain a JSON array")

    rules = []
    seen = set()
    for index, entry in enumerate(data):
        try:
            rule = rule_from_dict(entry, defaults)
        except MalformedRuleError as e:
            logger.error(f"Skipping rule #{index} in {path}: {e}")
            continue

        if rule.dedupe_key in seen:
            logger.warning(f"Skipping duplicate rule #{index} ({rule.dedupe_key})")
            continue

        seen.add(rule.dedupe_key)
        rules.append(rule)

    logger.info(f"Loaded {len(rules)} of {len(data)} rules from {path}")
    return rules


class ConfigManager:
    """Configuration manager for the application."""

    def __init__(self, config_path: str):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to configuration file
        """
        self.config_path = config_path
        self.base_dir = os.path.dirname(os.path.abspath(config_path))
        self.config = ConfigParser(interpolation=None)
        self._load_config()

    def _load_config(self) -> None:
        """Load and validate configuration file."""
        if not os.path.exists(self.config_path):
            raise NotifierConfigError(f"Config file not found: {self.config_path}")

        self.config.read(self.config_path, encoding='utf-8')
        self._validate_sections()

    def _validate_sections(self) -> None:
        """Validate that all required sections are present."""
        required_sections = {'telegram', 'schedule'}
        missing_sections = required_sections - set(self.config.sections())

        if missing_sections:
            raise NotifierConfigError(
                f"Missing required config sections: {', '.join(sorted(missing_sections))}"
            )

    def _get_env_or_config(self, section: str, key: str, env_var: str) -> str:
        """
        Get value from environment variable or config file.

        Args:
            section: Config section name
            key: Config key name
            env_var: Environment variable name

        Returns:
            Configuration value
        """
        value = os.getenv(env_var)
        if not value:
            value = self.config.get(section, key, fallback='')
        return value

    def _resolve_path(self, value: str) -> str:
        """Resolve a path relative to the directory holding the config file."""
        value = os.path.expanduser(value)
        if os.path.isabs(value):
            return value
        return os.path.join(self.base_dir, value)

    def _get_number(self, section: str, key: str, getter: str, fallback):
        try:
            return getattr(self.config, getter)(section, key, fallback=fallback)
        except ValueError as e:
            raise NotifierConfigError(f"[{section}] {key} is not a number: {e}")

    @property
    def telegram(self) -> TelegramConfig:
        """Get validated Telegram configuration."""
        return TelegramConfig(
            bot_token=self._get_env_or_config('telegram', 'bot_token', 'BOT_TOKEN').strip(),
            api_url=self.config.get('telegram', 'api_url', fallback='https://api.telegram.org').rstrip('/'),
            timeout_seconds=self._get_number('telegram', 'timeout_seconds', 'getfloat', 10.0),
            retries=self._get_number('telegram', 'retries', 'getint', 3)
        )

    @property
    def schedule(self) -> ScheduleConfig:
        """Get validated schedule configuration."""
        section = self.config['schedule']

        return ScheduleConfig(
            rules_file=self._resolve_path(section.get('rules_file', 'channels.json')),
            cache_file=self._resolve_path(section.get('cache_file', '.cache.json')),
            window_minutes=self._get_number('schedule', 'window_minutes', 'getint', 15),
            cooldown_hours=self._get_number('schedule', 'cooldown_hours', 'getfloat', 12.0),
            default_offset_minutes=self._get_number(
                'schedule', 'default_offset_minutes', 'getint', DEFAULT_OFFSET_MINUTES
            ),
            default_lead_minutes=self._get_number(
                'schedule', 'default_lead_minutes', 'getint', DEFAULT_LEAD_MINUTES
            ),
            default_text=section.get('default_text', DEFAULT_TEXT)
        )

    @property
    def logging_config(self) -> LoggingConfig:
        """Get validated logging configuration."""
        if 'logging' not in self.config:
            return LoggingConfig(log_dir=self._resolve_path('logs'))

        section = self.config['logging']
        return LoggingConfig(
            log_dir=self._resolve_path(section.get('log_dir', 'logs')),
            log_file=section.get('log_file', 'meeting-notifier.log'),
            level=section.get('level', 'INFO')
        )

    def load_rules(self) -> List[Rule]:
        """Load the rules referenced by the [schedule] section."""
        schedule = self.schedule
        return load_rules(schedule.rules_file, schedule)
