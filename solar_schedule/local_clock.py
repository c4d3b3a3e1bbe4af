"""Fixed-offset local wall clock.

All conversions are plain arithmetic on UTC instants: the process timezone,
locale and tz database are never consulted, and there are no DST transitions.
"""

from datetime import datetime, time, timedelta, timezone
from typing import Tuple

from .models import MAX_OFFSET_MINUTES, MIN_OFFSET_MINUTES, MalformedRuleError, Rule, Weekday
from .utils import ensure_utc


ANCHOR_TIME = time(12, 0)


def format_hhmm(hour: int, minute: int) -> str:
    """Zero-padded 24-hour ``HH:MM``."""
    return f"{hour:02d}:{minute:02d}"


class LocalClock:
    """Wall clock at a fixed offset from UTC."""

    def __init__(self, offset_minutes: int):
        """
        Args:
            offset_minutes: Minutes east of UTC (e.g. 180 for UTC+03:00)
        """
        if not MIN_OFFSET_MINUTES <= offset_minutes <= MAX_OFFSET_MINUTES:
            raise MalformedRuleError(
                f"offset_minutes must be between {MIN_OFFSET_MINUTES} and "
                f"{MAX_OFFSET_MINUTES}, got {offset_minutes}"
            )
        self.offset_minutes = offset_minutes
        self._offset = timedelta(minutes=offset_minutes)

    @classmethod
    def for_rule(cls, rule: Rule) -> 'LocalClock':
        return cls(rule.utc_offset_minutes)

    def to_local(self, instant: datetime) -> datetime:
        """Naive wall-clock view of ``instant``."""
        return ensure_utc(instant).replace(tzinfo=None) + self._offset

    def to_utc(self, local: datetime) -> datetime:
        """Inverse of :meth:`to_local` for a naive wall-clock datetime."""
        return (local - self._offset).replace(tzinfo=timezone.utc)

    def weekday(self, instant: datetime) -> Weekday:
        return Weekday.from_python(self.to_local(instant).weekday())

    def to_local_hhmm(self, instant: datetime) -> Tuple[int, int]:
        """Local (hour, minute) of ``instant``; seconds are truncated."""
        local = self.to_local(instant)
        return local.hour, local.minute

    def minute_of_week(self, instant: datetime) -> int:
        """Minutes since local Sunday 00:00."""
        local = self.to_local(instant)
        return int(self.weekday(instant)) * 1440 + local.hour * 60 + local.minute

    def next_occurrence_anchor(self, now: datetime, target_weekday: Weekday) -> datetime:
        """
        Get local noon on the next local date (today included) falling on a weekday.

        Noon is an unambiguous point well inside the local day, which makes it a
        safe anchor for the sunset calculation. If today is the target weekday the
        anchor is today's noon even when ``now`` is already past it.

        Args:
            now: Current instant (timezone-aware)
            target_weekday: Weekday to look for

        Returns:
            The anchor as a UTC datetime
        """
        local_now = self.to_local(now)
        local_weekday = Weekday.from_python(local_now.weekday())
        add_days = (int(target_weekday) - int(local_weekday) + 7) % 7

        anchor_date = local_now.date() + timedelta(days=add_days)
        return self.to_utc(datetime.combine(anchor_date, ANCHOR_TIME))
