"""Show the computed meeting time for every configured rule without sending anything."""

import os
import sys
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from solar_schedule import (
    DedupeStore,
    JsonFileDedupeStore,
    NoSunsetError,
    Rule,
    ScheduleMatcher,
    get_meeting_time,
)

from .app import DEFAULT_CONFIG_PATH
from .config import ConfigManager
from .utils import NotifierConfigError


def probe_rules(
    rules: Sequence[Rule],
    matcher: ScheduleMatcher,
    store: DedupeStore,
    now: Optional[datetime] = None
) -> List[str]:
    """
    Describe each rule: next anchor, sunset, meeting time and whether it is due.

    Args:
        rules: Rules to describe
        matcher: Matcher configured like the real run
        store: Dedupe store, already loaded
        now: Instant to evaluate at (defaults to the current time)

    Returns:
        One line per rule
    """
    now = now or datetime.now(timezone.utc)
    lines = []

    for rule in rules:
        due = matcher.is_due(rule, now, store.get(rule.dedupe_key))
        prefix = f"{rule.identity} [{rule.schedule}, offset {rule.utc_offset_minutes:+d} min]"
        try:
            meeting = get_meeting_time(rule, now)
        except NoSunsetError as e:
            lines.append(f"{prefix}: no sunset ({e.reason}), due={due}")
            continue

        lines.append(
            f"{prefix}: anchor {meeting.anchor:%Y-%m-%d %H:%M}Z, "
            f"sunset {meeting.sunset:%H:%M}Z, meeting {meeting.hhmm} local, due={due}"
        )

    return lines


def run_sunset_probe() -> int:
    config_path = os.getenv('MEETING_NOTIFIER_CONFIG', DEFAULT_CONFIG_PATH)

    try:
        config = ConfigManager(config_path)
        schedule = config.schedule
        rules = config.load_rules()
    except NotifierConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    store = JsonFileDedupeStore(schedule.cache_file)
    store.load()
    matcher = ScheduleMatcher(window=schedule.window, cooldown=schedule.cooldown)

    for line in probe_rules(rules, matcher, store):
        print(line)
    return 0


if __name__ == '__main__':
    sys.exit(run_sunset_probe())
