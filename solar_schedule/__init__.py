"""Sunset-relative weekly schedules: ephemeris, local clock, window matching and dedupe."""

from .models import (
    GeoPoint,
    MalformedRuleError,
    Rule,
    Schedule,
    SolarScheduleError,
    Weekday,
)
from .sunset import NoSunsetError, get_sunset_time
from .local_clock import LocalClock, format_hhmm
from .schedule import COOLDOWN, WINDOW, ScheduleMatcher
from .dedupe_store import (
    DedupeStore,
    DedupeStoreError,
    InMemoryDedupeStore,
    JsonFileDedupeStore,
)
from .meeting import MeetingTime, get_meeting_time, meeting_time_hhmm

__all__ = [
    'GeoPoint',
    'MalformedRuleError',
    'Rule',
    'Schedule',
    'SolarScheduleError',
    'Weekday',
    'NoSunsetError',
    'get_sunset_time',
    'LocalClock',
    'format_hhmm',
    'COOLDOWN',
    'WINDOW',
    'ScheduleMatcher',
    'DedupeStore',
    'DedupeStoreError',
    'InMemoryDedupeStore',
    'JsonFileDedupeStore',
    'MeetingTime',
    'get_meeting_time',
    'meeting_time_hhmm',
]
