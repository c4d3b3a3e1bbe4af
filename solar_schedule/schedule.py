"""Weekly schedule window matching with duplicate suppression."""

import logging
from datetime import datetime, timedelta
from typing import Optional

from .local_clock import LocalClock
from .models import Rule
from .utils import ensure_utc

logger = logging.getLogger(__name__)

MINUTES_PER_WEEK = 7 * 1440

# The job is polled every few minutes, so the window must exceed the polling interval
WINDOW = timedelta(minutes=15)
COOLDOWN = timedelta(hours=12)


class ScheduleMatcher:
    """Decides whether a rule is due at a given instant."""

    def __init__(self, window: timedelta = WINDOW, cooldown: timedelta = COOLDOWN):
        """
        Initialize the matcher.

        Args:
            window: How long after the scheduled minute a check still counts as on time
            cooldown: Minimum time between two firings of the same rule
        """
        if window <= timedelta(0):
            raise ValueError(f"window must be positive, got {window}")
        if cooldown < window:
            raise ValueError(
                f"cooldown ({cooldown}) must not be shorter than the window ({window})"
            )
        self.window = window
        self.cooldown = cooldown

    def minutes_since_scheduled(self, rule: Rule, now: datetime) -> int:
        """
        Minutes elapsed since the most recent scheduled moment of ``rule``.

        Always in ``[0, 10080)``: the difference is taken modulo one week, so a
        ``SAT 23:58`` schedule is 2 minutes old at Sunday 00:00, while a
        ``SUN 00:00`` schedule is 10078 minutes old at Saturday 23:58.
        """
        now_minutes = LocalClock.for_rule(rule).minute_of_week(now)
        return (now_minutes - rule.schedule.minute_of_week) % MINUTES_PER_WEEK

    def in_window(self, rule: Rule, now: datetime) -> bool:
        return self.minutes_since_scheduled(rule, now) < self.window.total_seconds() / 60

    def cooled_down(self, now: datetime, last_fired: Optional[datetime]) -> bool:
        if last_fired is None:
            return True
        return ensure_utc(now) - ensure_utc(last_fired) > self.cooldown

    def is_due(self, rule: Rule, now: datetime, last_fired: Optional[datetime] = None) -> bool:
        """
        Check whether ``rule`` should fire at ``now``.

        Args:
            rule: Rule to check
            now: Current instant (timezone-aware)
            last_fired: When the rule last fired successfully, if ever

        Returns:
            True if ``now`` is inside the window after the scheduled minute and
            the cooldown since ``last_fired`` has elapsed
        """
        if not self.in_window(rule, now):
            return False

        if not self.cooled_down(now, last_fired):
            logger.info(
                f"Rule {rule.identity} is in its window but fired at "
                f"{last_fired.isoformat()}, within the {self.cooldown} cooldown"
            )
            return False

        return True
