"""Rule and location models for weekly sunset-relative schedules."""

import re
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional


DEFAULT_OFFSET_MINUTES = 180
DEFAULT_LEAD_MINUTES = 60

# UTC-12:00 .. UTC+14:00 covers every civil offset in use
MIN_OFFSET_MINUTES = -12 * 60
MAX_OFFSET_MINUTES = 14 * 60

_DESCRIPTOR_RE = re.compile(r'^\s*([A-Za-z]{3})\s+(\d{1,2}):(\d{2})\s*$')


class SolarScheduleError(Exception):
    """Base exception for schedule computation errors."""
    pass


class MalformedRuleError(SolarScheduleError):
    """Raised when a rule, schedule descriptor or coordinate is out of range."""
    pass


class Weekday(IntEnum):
    """Day of week, Sunday first."""
    SUN = 0
    MON = 1
    TUE = 2
    WED = 3
    THU = 4
    FRI = 5
    SAT = 6

    @classmethod
    def from_python(cls, python_weekday: int) -> 'Weekday':
        """Convert ``datetime.weekday()`` (Monday=0) to a Sunday-first weekday."""
        return cls((python_weekday + 1) % 7)

    @classmethod
    def parse(cls, value: str) -> 'Weekday':
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise MalformedRuleError(f"Unknown weekday: {value!r}")


@dataclass(frozen=True)
class GeoPoint:
    """Latitude/longitude pair in decimal degrees."""
    latitude: float
    longitude: float

    def __post_init__(self):
        if not -90 <= self.latitude <= 90:
            raise MalformedRuleError(
                f"latitude must be between -90 and 90, got {self.latitude}"
            )
        if not -180 <= self.longitude <= 180:
            raise MalformedRuleError(
                f"longitude must be between -180 and 180, got {self.longitude}"
            )


@dataclass(frozen=True)
class Schedule:
    """Weekly schedule: a weekday plus a local time of day."""
    weekday: Weekday
    hour: int
    minute: int

    def __post_init__(self):
        if not 0 <= int(self.weekday) <= 6:
            raise MalformedRuleError(f"weekday must be between 0 and 6, got {self.weekday}")
        if not 0 <= self.hour <= 23:
            raise MalformedRuleError(f"hour must be between 0 and 23, got {self.hour}")
        if not 0 <= self.minute <= 59:
            raise MalformedRuleError(f"minute must be between 0 and 59, got {self.minute}")
        # Accept plain ints for the weekday but always store the enum
        object.__setattr__(self, 'weekday', Weekday(self.weekday))

    @classmethod
    def parse(cls, descriptor: str) -> 'Schedule':
        """
        Parse a schedule descriptor such as ``"SAT 09:00"``.

        Args:
            descriptor: Three-letter weekday followed by HH:MM (24-hour)

        Returns:
            Parsed schedule

        Raises:
            MalformedRuleError: If the descriptor cannot be parsed or is out of range
        """
        if not isinstance(descriptor, str):
            raise MalformedRuleError(f"Schedule must be a string, got {descriptor!r}")

        match = _DESCRIPTOR_RE.match(descriptor)
        if not match:
            raise MalformedRuleError(
                f"Schedule must look like 'SAT 09:00', got {descriptor!r}"
            )

        day, hour, minute = match.groups()
        return cls(Weekday.parse(day), int(hour), int(minute))

    @property
    def minute_of_week(self) -> int:
        return int(self.weekday) * 1440 + self.hour * 60 + self.minute

    def __str__(self) -> str:
        return f"{self.weekday.name} {self.hour:02d}:{self.minute:02d}"


@dataclass(frozen=True)
class Rule:
    """A recurring notification: who to notify, where, and when."""
    identity: str
    location: GeoPoint
    schedule: Schedule
    utc_offset_minutes: int = DEFAULT_OFFSET_MINUTES
    lead_minutes: int = DEFAULT_LEAD_MINUTES
    text: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        if not str(self.identity).strip():
            raise MalformedRuleError("Rule identity must not be empty")
        if not MIN_OFFSET_MINUTES <= self.utc_offset_minutes <= MAX_OFFSET_MINUTES:
            raise MalformedRuleError(
                f"utc_offset_minutes must be between {MIN_OFFSET_MINUTES} and "
                f"{MAX_OFFSET_MINUTES}, got {self.utc_offset_minutes}"
            )
        if not 0 <= self.lead_minutes < 1440:
            raise MalformedRuleError(
                f"lead_minutes must be between 0 and 1439, got {self.lead_minutes}"
            )

    @property
    def dedupe_key(self) -> str:
        """Store key; changes whenever the offset or schedule of the rule changes."""
        return f"{self.identity}::offset{self.utc_offset_minutes}::{self.schedule}"
