"""Meeting time calculation: sunset on the rule's weekday minus the lead time."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from .local_clock import LocalClock, format_hhmm
from .models import Rule
from .sunset import get_sunset_time


@dataclass(frozen=True)
class MeetingTime:
    """Intermediate values of a meeting time calculation, all in UTC."""
    anchor: datetime
    sunset: datetime
    meeting: datetime
    hhmm: str


def get_meeting_time(rule: Rule, now: datetime) -> MeetingTime:
    """
    Compute the meeting time for the next occurrence of the rule's weekday.

    Args:
        rule: Rule providing location, weekday, offset and lead time
        now: Current instant (timezone-aware)

    Returns:
        MeetingTime with the anchor, sunset and meeting instants and the local HH:MM

    Raises:
        NoSunsetError: If there is no sunset at the rule's location on that day
    """
    clock = LocalClock.for_rule(rule)
    anchor = clock.next_occurrence_anchor(now, rule.schedule.weekday)
    sunset = get_sunset_time(anchor, rule.location.latitude, rule.location.longitude)
    meeting = sunset - timedelta(minutes=rule.lead_minutes)

    return MeetingTime(
        anchor=anchor,
        sunset=sunset,
        meeting=meeting,
        hhmm=format_hhmm(*clock.to_local_hhmm(meeting)),
    )


def meeting_time_hhmm(rule: Rule, now: datetime) -> str:
    """Local ``HH:MM`` of the meeting, as shown to recipients."""
    return get_meeting_time(rule, now).hhmm
