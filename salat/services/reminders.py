"""Turn a prayer schedule into (timestamp, message) reminders.

Delivery is somebody else's job: a :class:`NotificationScheduler` receives the
list and fires it. ``salat.jobs.reminders`` ships an in-process scheduler for
development and tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from .prayer_engine import PRAYER_ORDER, PrayerTimeSet
from .solar import ensure_aware

logger = logging.getLogger(__name__)

DEFAULT_REMINDER_MINUTES = 10


@dataclass(frozen=True)
class NotificationSettings:
    enabled: bool = True
    reminder_minutes: int = DEFAULT_REMINDER_MINUTES
    prayers: Mapping[str, bool] = field(
        default_factory=lambda: {p.field: True for p in PRAYER_ORDER}
    )

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "NotificationSettings":
        data = dict(data or {})
        prayers = {p.field: True for p in PRAYER_ORDER}
        prayers.update({str(k).lower(): bool(v) for k, v in (data.get("prayers") or {}).items()})
        return cls(
            enabled=bool(data.get("enabled", True)),
            reminder_minutes=int(data.get("reminder_minutes", DEFAULT_REMINDER_MINUTES)),
            prayers=prayers,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "reminder_minutes": self.reminder_minutes,
            "prayers": dict(self.prayers),
        }


@dataclass(frozen=True)
class Reminder:
    when: datetime
    title: str
    body: str
    data: Mapping[str, str] = field(default_factory=dict)

    @property
    def message(self) -> str:
        return f"{self.title}: {self.body}"


class NotificationScheduler(Protocol):
    def schedule(self, reminders: Sequence[Reminder]) -> List[str]:
        ...

    def cancel_all(self) -> None:
        ...


def build_reminders(
    times: PrayerTimeSet,
    now: datetime,
    settings: Optional[NotificationSettings] = None,
    location_label: Optional[str] = None,
) -> List[Reminder]:
    """Prayer-time and lead-time reminders strictly after ``now``, in time order."""

    settings = settings or NotificationSettings()
    if not settings.enabled:
        return []
    now = ensure_aware(now)
    where = f" in {location_label}" if location_label else ""
    lead = max(0, settings.reminder_minutes)

    reminders: List[Reminder] = []
    for prayer, moment in times.prayers():
        if not settings.prayers.get(prayer.field, True):
            continue
        name = prayer.value
        if moment > now:
            reminders.append(
                Reminder(
                    when=moment,
                    title=f"{name} Prayer Time",
                    body=f"It's time for {name} prayer{where}",
                    data={"prayer_name": name, "type": "prayer_time"},
                )
            )
        early = moment - timedelta(minutes=lead)
        if lead and early > now:
            reminders.append(
                Reminder(
                    when=early,
                    title=f"{name} Prayer Reminder",
                    body=f"{name} prayer is in {lead} minutes",
                    data={"prayer_name": name, "type": "prayer_reminder"},
                )
            )
    reminders.sort(key=lambda r: r.when)
    return reminders


def schedule_prayer_reminders(
    scheduler: NotificationScheduler,
    times: PrayerTimeSet,
    now: datetime,
    settings: Optional[NotificationSettings] = None,
    location_label: Optional[str] = None,
) -> List[str]:
    """Replace everything pending on ``scheduler`` with today's reminders."""

    scheduler.cancel_all()
    reminders = build_reminders(times, now, settings, location_label)
    ids = scheduler.schedule(reminders)
    logger.info(
        "prayer_reminders_scheduled",
        extra={"count": len(ids), "date": times.date.isoformat(), "method": times.method_name},
    )
    return ids
