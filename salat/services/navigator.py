"""Locate "now" within a computed prayer schedule."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional

from .prayer_engine import Prayer, PrayerTimeSet, calculate_with_parameters
from .solar import GeoCoordinate, ensure_aware

# Used for the next-day Fajr when no coordinate is available to recompute it.
DEFAULT_FAJR = time(5, 0)


def _local_zone(times: PrayerTimeSet) -> tzinfo:
    """The schedule's zone, or local mean time at its longitude for UTC sets."""

    tz = times.tzinfo
    if tz is not None and tz is not timezone.utc:
        return tz
    offset = round(times.coordinate.longitude / 15.0 * 60)
    return timezone(timedelta(minutes=offset))


def _fajr_on(day: date, times: PrayerTimeSet, coordinate: Optional[GeoCoordinate]) -> datetime:
    if coordinate is not None:
        return calculate_with_parameters(coordinate, day, times.parameters, tz=times.tzinfo).fajr
    local = datetime.combine(day, DEFAULT_FAJR, tzinfo=_local_zone(times))
    return local.astimezone(times.tzinfo or timezone.utc)


@dataclass(frozen=True)
class PrayerEntry:
    name: Prayer
    time: datetime
    is_next_day: bool = False


@dataclass(frozen=True)
class TimeRemaining:
    hours: int
    minutes: int

    @property
    def total_minutes(self) -> int:
        return self.hours * 60 + self.minutes


def next_prayer(
    times: PrayerTimeSet,
    now: datetime,
    coordinate: Optional[GeoCoordinate] = None,
) -> PrayerEntry:
    """First of the five prayers strictly after ``now``.

    After Isha the Fajr of the day following ``times.date`` is returned with
    ``is_next_day`` set. It is recomputed with the same parameters when a
    coordinate is given, else a fixed 05:00 estimate in the location's local
    time is used (local mean time when the schedule is in UTC).
    """

    now = ensure_aware(now)
    for prayer, moment in times.prayers():
        if moment > now:
            return PrayerEntry(prayer, moment)

    # a stale schedule rolls forward to the local day of ``now``
    local_today = now.astimezone(_local_zone(times)).date()
    day = max(times.date + timedelta(days=1), local_today)
    fajr = _fajr_on(day, times, coordinate)
    if fajr <= now:
        fajr = _fajr_on(day + timedelta(days=1), times, coordinate)
    return PrayerEntry(Prayer.FAJR, fajr, is_next_day=True)


def current_prayer(times: PrayerTimeSet, now: datetime) -> Optional[PrayerEntry]:
    """Latest prayer whose time is at or before ``now``; ``None`` before Fajr."""

    now = ensure_aware(now)
    current = None
    for prayer, moment in times.prayers():
        if moment <= now:
            current = PrayerEntry(prayer, moment)
        else:
            break
    return current


def time_remaining(target: datetime, now: datetime) -> TimeRemaining:
    seconds = (ensure_aware(target) - ensure_aware(now)).total_seconds()
    total_minutes = max(0, int(seconds // 60))
    hours, minutes = divmod(total_minutes, 60)
    return TimeRemaining(hours=hours, minutes=minutes)
