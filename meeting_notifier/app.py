"""Main application module for the Meeting Notifier."""

import os
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from solar_schedule import (
    DedupeStore,
    DedupeStoreError,
    JsonFileDedupeStore,
    NoSunsetError,
    Rule,
    ScheduleMatcher,
    get_meeting_time,
)
from solar_schedule.utils import ensure_utc

from .api import MessageSender, TelegramSender, render_message
from .config import ConfigManager, ScheduleConfig
from .utils import (
    setup_logging,
    get_logger,
    NotifierError,
    NotifierConfigError
)

DEFAULT_CONFIG_PATH = 'conf/meeting-notifier.ini'


@dataclass
class RunReport:
    """Outcome of one pass over the rules, by rule identity."""
    sent: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    def summary(self) -> str:
        return f"{len(self.sent)} sent, {len(self.skipped)} skipped, {len(self.failed)} failed"


class MeetingNotifier:
    """Checks every rule and sends the meeting message for those that are due."""

    def __init__(
        self,
        rules: Sequence[Rule],
        schedule_config: ScheduleConfig,
        sender: MessageSender,
        store: Optional[DedupeStore] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize the notifier.

        Args:
            rules: Rules to process, in order
            schedule_config: Window, cooldown and default text settings
            sender: Delivers rendered messages
            store: Dedupe store; defaults to the JSON cache from ``schedule_config``
            clock: Returns the current UTC instant; defaults to the system clock
        """
        self.rules = list(rules)
        self.schedule_config = schedule_config
        self.sender = sender
        self.store = store if store is not None else JsonFileDedupeStore(schedule_config.cache_file)
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.matcher = ScheduleMatcher(
            window=schedule_config.window,
            cooldown=schedule_config.cooldown
        )
        self.logger = get_logger('meeting-notifier')

    @classmethod
    def from_config(cls, config: ConfigManager, **kwargs) -> 'MeetingNotifier':
        """Build a notifier from a loaded configuration file."""
        schedule_config = config.schedule
        if 'sender' not in kwargs:
            kwargs['sender'] = TelegramSender.from_config(config.telegram)
        return cls(
            rules=config.load_rules(),
            schedule_config=schedule_config,
            **kwargs
        )

    def run(self, now: Optional[datetime] = None) -> RunReport:
        """
        Process every rule once.

        The dedupe store is loaded before the first rule and saved after the
        last one. A failing rule is logged and does not stop the others.

        Args:
            now: Instant to evaluate the rules at; defaults to ``clock()``

        Returns:
            RunReport listing sent, skipped and failed rules

        Raises:
            DedupeStoreError: If the dedupe store cannot be saved at the end of the run
        """
        now = ensure_utc(now or self.clock())
        report = RunReport()

        self.store.load()
        self.logger.info(f"Checking {len(self.rules)} rules at {now.isoformat()}")

        for rule in self.rules:
            outcome = self._process_rule(rule, now)
            getattr(report, outcome).append(rule.identity)

        self.logger.info(f"Run finished: {report.summary()}")

        try:
            self.store.save()
        except DedupeStoreError as e:
            self.logger.error(f"Could not save dedupe cache, sent rules may fire again: {e}")
            raise

        return report

    def _process_rule(self, rule: Rule, now: datetime) -> str:
        """Handle one rule; returns the RunReport bucket it belongs to."""
        log = get_logger('meeting-notifier', {'rule': rule.identity, 'schedule': str(rule.schedule)})
        key = rule.dedupe_key

        try:
            if not self.matcher.is_due(rule, now, self.store.get(key)):
                log.debug("Not due")
                return 'skipped'

            meeting = get_meeting_time(rule, now)
            log.info(
                f"Due - sunset {meeting.sunset.isoformat()}, "
                f"meeting at {meeting.hhmm} local (offset {rule.utc_offset_minutes} min)"
            )

            text = render_message(rule.text or self.schedule_config.default_text, meeting.hhmm)
            self.sender.send(rule.identity, text)

        except NoSunsetError as e:
            log.warning(f"Skipping rule for this run: {e}")
            return 'skipped'

        except NotifierError as e:
            log.error(f"Send failed: {e}")
            return 'failed'

        except Exception as e:
            log.exception(f"Unexpected error: {e}")
            return 'failed'

        self.store.set(key, now)
        return 'sent'


def main() -> int:
    """Main entry point for the application."""
    # Get config path from environment or use default
    config_path = os.getenv('MEETING_NOTIFIER_CONFIG', DEFAULT_CONFIG_PATH)

    try:
        config = ConfigManager(config_path)
        logging_config = config.logging_config
        setup_logging(
            log_dir=logging_config.log_dir,
            log_file=logging_config.log_file,
            level=logging_config.level_number
        )
        app = MeetingNotifier.from_config(config)
        report = app.run()

    except NotifierConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    except DedupeStoreError as e:
        print(f"Dedupe cache error: {e}", file=sys.stderr)
        return 1

    except Exception as e:
        print(f"Application failed: {e}", file=sys.stderr)
        return 1

    return 1 if report.failed else 0


if __name__ == '__main__':
    sys.exit(main())
