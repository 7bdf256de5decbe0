import logging
from datetime import date, timedelta

import pytest

from salat.services.prayer_engine import calculate
from salat.services.reminders import (
    NotificationSettings,
    build_reminders,
    schedule_prayer_reminders,
)
from salat.services.solar import GeoCoordinate


@pytest.fixture
def times():
    return calculate(GeoCoordinate(21.3891, 39.8579), date(2024, 3, 15), tz="Asia/Riyadh")


def test_full_day_of_reminders(times):
    reminders = build_reminders(times, times.fajr - timedelta(minutes=30), location_label="Makkah")
    assert len(reminders) == 10
    assert [r.when for r in reminders] == sorted(r.when for r in reminders)
    first, second = reminders[0], reminders[1]
    assert first.when == times.fajr - timedelta(minutes=10)
    assert first.title == "Fajr Prayer Reminder"
    assert first.body == "Fajr prayer is in 10 minutes"
    assert second.title == "Fajr Prayer Time"
    assert second.body == "It's time for Fajr prayer in Makkah"
    assert second.data == {"prayer_name": "Fajr", "type": "prayer_time"}


def test_only_future_reminders(times):
    reminders = build_reminders(times, times.dhuhr)
    assert all(r.when > times.dhuhr for r in reminders)
    assert not any(r.data["prayer_name"] == "Dhuhr" for r in reminders)
    assert build_reminders(times, times.isha) == []


def test_lead_time_already_passed(times):
    reminders = build_reminders(times, times.maghrib - timedelta(minutes=5))
    maghrib = [r for r in reminders if r.data["prayer_name"] == "Maghrib"]
    assert [r.data["type"] for r in maghrib] == ["prayer_time"]


def test_settings_filter(times):
    now = times.fajr - timedelta(hours=1)
    assert build_reminders(times, now, NotificationSettings(enabled=False)) == []
    settings = NotificationSettings.from_dict({"reminder_minutes": 0, "prayers": {"Asr": False}})
    reminders = build_reminders(times, now, settings)
    assert len(reminders) == 4
    assert all(r.data["type"] == "prayer_time" for r in reminders)
    assert "Asr" not in {r.data["prayer_name"] for r in reminders}


def test_settings_round_trip():
    settings = NotificationSettings.from_dict({"enabled": False, "reminder_minutes": 15})
    data = settings.to_dict()
    assert data["enabled"] is False
    assert data["reminder_minutes"] == 15
    assert set(data["prayers"]) == {"fajr", "dhuhr", "asr", "maghrib", "isha"}
    assert NotificationSettings.from_dict(data) == settings


class RecordingScheduler:
    def __init__(self):
        self.calls = []

    def cancel_all(self):
        self.calls.append("cancel_all")

    def schedule(self, reminders):
        self.calls.append(("schedule", list(reminders)))
        return [f"id{i}" for i, _ in enumerate(reminders)]


def test_schedule_replaces_pending(times, caplog):
    scheduler = RecordingScheduler()
    with caplog.at_level(logging.INFO, logger="salat.services.reminders"):
        ids = schedule_prayer_reminders(scheduler, times, times.asr, location_label="Makkah")
    assert scheduler.calls[0] == "cancel_all"
    assert len(ids) == len(scheduler.calls[1][1]) == 4
    assert any(r.getMessage() == "prayer_reminders_scheduled" for r in caplog.records)
