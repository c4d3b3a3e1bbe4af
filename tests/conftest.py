from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pytest


ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from meeting_notifier.api import MessageSender  # noqa: E402
from meeting_notifier.utils import TelegramAPIError  # noqa: E402
from solar_schedule import GeoPoint, Rule, Schedule  # noqa: E402


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def make_rule(
    schedule: str = "SAT 09:00",
    identity: str = "chat-1",
    lat: float = 45.0428,
    lon: float = 41.9734,
    offset: int = 180,
    lead: int = 60,
    text: str | None = None,
) -> Rule:
    return Rule(
        identity=identity,
        location=GeoPoint(lat, lon),
        schedule=Schedule.parse(schedule),
        utc_offset_minutes=offset,
        lead_minutes=lead,
        text=text,
    )


class FakeSender(MessageSender):
    def __init__(self, fail_for: Tuple[str, ...] = ()) -> None:
        self.sent: List[Tuple[str, str]] = []
        self.fail_for = fail_for

    def send(self, chat_id: str, text: str) -> Dict[str, Any]:
        if chat_id in self.fail_for:
            raise TelegramAPIError(f"cannot reach {chat_id}")
        self.sent.append((chat_id, text))
        return {"message_id": len(self.sent)}


@pytest.fixture(autouse=True)
def _reset_timezone_for_tests(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TZ", raising=False)


@pytest.fixture
def restore_logging():
    names = ("meeting-notifier", "solar_schedule", "meeting_notifier")
    saved = {
        name: (logging.getLogger(name).handlers[:], logging.getLogger(name).propagate, logging.getLogger(name).level)
        for name in names
    }
    yield
    for name, (handlers, propagate, level) in saved.items():
        logger = logging.getLogger(name)
        for handler in logger.handlers[:]:
            if handler not in handlers:
                logger.removeHandler(handler)
                handler.close()
        logger.propagate = propagate
        logger.setLevel(level)
