from __future__ import annotations

import json
import logging
import os
import textwrap

import pytest

from meeting_notifier.config import ConfigManager, ScheduleConfig, TelegramConfig, load_rules, rule_from_dict
from meeting_notifier.utils import NotifierConfigError
from solar_schedule import MalformedRuleError, Weekday

TOKEN = "123456:ABC-def_ghi"


def write_config(tmp_path, body: str) -> str:
    path = tmp_path / "meeting-notifier.ini"
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return str(path)


def schedule_defaults(tmp_path, **overrides) -> ScheduleConfig:
    values = dict(rules_file=str(tmp_path / "channels.json"), cache_file=str(tmp_path / ".cache.json"))
    values.update(overrides)
    return ScheduleConfig(**values)


@pytest.fixture(autouse=True)
def _no_token_in_environment(monkeypatch):
    monkeypatch.delenv("BOT_TOKEN", raising=False)


def test_full_config_is_parsed(tmp_path):
    path = write_config(tmp_path, f"""
        [telegram]
        bot_token = {TOKEN}
        timeout_seconds = 5
        retries = 2

        [schedule]
        rules_file = rules/channels.json
        cache_file = /var/cache/notifier.json
        window_minutes = 20
        cooldown_hours = 6
        default_offset_minutes = 240
        default_lead_minutes = 45
        default_text = Meet at {{HHMM}}

        [logging]
        log_dir = logs
        level = debug
    """)

    config = ConfigManager(path)

    assert config.telegram == TelegramConfig(TOKEN, "https://api.telegram.org", 5.0, 2)
    schedule = config.schedule
    assert schedule.rules_file == os.path.join(str(tmp_path), "rules", "channels.json")
    assert schedule.cache_file == "/var/cache/notifier.json"
    assert schedule.window_minutes == 20
    assert schedule.cooldown.total_seconds() == 6 * 3600
    assert schedule.default_offset_minutes == 240
    assert schedule.default_lead_minutes == 45
    assert schedule.default_text == "Meet at {HHMM}"
    assert config.logging_config.level == "DEBUG"
    assert config.logging_config.level_number == logging.DEBUG
    assert config.logging_config.log_dir == os.path.join(str(tmp_path), "logs")


def test_defaults_when_only_required_sections_exist(tmp_path):
    path = write_config(tmp_path, f"""
        [telegram]
        bot_token = {TOKEN}

        [schedule]
    """)

    config = ConfigManager(path)

    schedule = config.schedule
    assert schedule.rules_file == os.path.join(str(tmp_path), "channels.json")
    assert schedule.cache_file == os.path.join(str(tmp_path), ".cache.json")
    assert schedule.window_minutes == 15
    assert schedule.cooldown_hours == 12
    assert schedule.default_offset_minutes == 180
    assert schedule.default_lead_minutes == 60
    assert config.logging_config.log_file == "meeting-notifier.log"


def test_environment_token_wins(tmp_path, monkeypatch):
    monkeypatch.setenv("BOT_TOKEN", "999:fromenv")
    path = write_config(tmp_path, f"""
        [telegram]
        bot_token = {TOKEN}

        [schedule]
    """)

    assert ConfigManager(path).telegram.bot_token == "999:fromenv"


def test_missing_config_file(tmp_path):
    with pytest.raises(NotifierConfigError, match="not found"):
        ConfigManager(str(tmp_path / "nope.ini"))


def test_missing_sections(tmp_path):
    path = write_config(tmp_path, """
        [telegram]
        bot_token = 1:a
    """)

    with pytest.raises(NotifierConfigError, match="schedule"):
        ConfigManager(path)


@pytest.mark.parametrize("token", ["", "not-a-token"])
def test_invalid_token(tmp_path, token):
    path = write_config(tmp_path, f"""
        [telegram]
        bot_token = {token}

        [schedule]
    """)

    with pytest.raises(NotifierConfigError):
        ConfigManager(path).telegram


def test_non_numeric_setting(tmp_path):
    path = write_config(tmp_path, f"""
        [telegram]
        bot_token = {TOKEN}

        [schedule]
        window_minutes = fifteen
    """)

    with pytest.raises(NotifierConfigError, match="window_minutes"):
        ConfigManager(path).schedule


@pytest.mark.parametrize(
    "overrides",
    [{"window_minutes": 0}, {"window_minutes": 30, "cooldown_hours": 0.25}, {"default_text": "no placeholder"}],
)
def test_invalid_schedule_settings(tmp_path, overrides):
    with pytest.raises(NotifierConfigError):
        schedule_defaults(tmp_path, **overrides)


def test_rule_from_dict_applies_defaults(tmp_path):
    defaults = schedule_defaults(tmp_path, default_offset_minutes=240, default_lead_minutes=30)

    rule = rule_from_dict({"chat_id": -1001, "lat": "45.04", "lon": 41.97, "schedule": "SAT 09:00"}, defaults)

    assert rule.identity == "-1001"
    assert rule.location.latitude == 45.04
    assert rule.schedule.weekday is Weekday.SAT
    assert rule.utc_offset_minutes == 240
    assert rule.lead_minutes == 30
    assert rule.text == defaults.default_text


@pytest.mark.parametrize(
    "entry",
    [
        {"lat": 1, "lon": 1, "schedule": "SAT 09:00"},
        {"chat_id": 1, "lat": "north", "lon": 1, "schedule": "SAT 09:00"},
        {"chat_id": 1, "lat": 95, "lon": 1, "schedule": "SAT 09:00"},
        {"chat_id": 1, "lat": 1, "lon": 1, "schedule": "Saturday"},
        {"chat_id": 1, "lat": 1, "lon": 1, "schedule": "SAT 09:00", "offset_minutes": 180.5},
        {"chat_id": 1, "lat": 1, "lon": 1, "schedule": "SAT 09:00", "lead_minutes": True},
        {"chat_id": 1, "lat": 1, "lon": 1, "schedule": "SAT 09:00", "text": 123},
        ["chat", 1, 1],
    ],
)
def test_rule_from_dict_rejects_bad_entries(tmp_path, entry):
    with pytest.raises(MalformedRuleError):
        rule_from_dict(entry, schedule_defaults(tmp_path))


def test_load_rules_skips_malformed_and_duplicate_entries(tmp_path, caplog):
    path = tmp_path / "channels.json"
    path.write_text(json.dumps([
        {"chat_id": "a", "lat": 45, "lon": 42, "schedule": "SAT 09:00"},
        {"chat_id": "b", "lat": 45, "lon": 42, "schedule": "SAT 25:00"},
        {"chat_id": "a", "lat": 46, "lon": 43, "schedule": "SAT 09:00"},
        {"chat_id": "c", "lat": 45, "lon": 42, "schedule": "SUN 10:30", "offset_minutes": 0, "text": "At {HHMM}"},
    ]), encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        rules = load_rules(str(path), schedule_defaults(tmp_path))

    assert [rule.identity for rule in rules] == ["a", "c"]
    assert rules[1].text == "At {HHMM}"
    assert "Skipping rule #1" in caplog.text
    assert "duplicate" in caplog.text


def test_load_rules_missing_file(tmp_path):
    with pytest.raises(NotifierConfigError, match="not found"):
        load_rules(str(tmp_path / "channels.json"), schedule_defaults(tmp_path))


@pytest.mark.parametrize("content", ["{bad json", '{"chat_id": 1}'])
def test_load_rules_requires_a_json_array(tmp_path, content):
    path = tmp_path / "channels.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(NotifierConfigError):
        load_rules(str(path), schedule_defaults(tmp_path))


def test_load_rules_skips_rule_with_non_string_text(tmp_path):
    path = tmp_path / "channels.json"
    path.write_text(json.dumps([
        {"chat_id": "bad", "lat": 45, "lon": 42, "schedule": "SAT 09:00", "text": 123},
        {"chat_id": "good", "lat": 45, "lon": 42, "schedule": "SAT 09:00"},
    ]), encoding="utf-8")

    rules = load_rules(str(path), schedule_defaults(tmp_path))

    assert [rule.identity for rule in rules] == ["good"]
