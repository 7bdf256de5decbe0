"""Public entry points consumed by the routers, the CLI and the reminder jobs.

Every function here is pure: identical inputs give identical outputs and no
state is shared between calls, so results may be cached per day and place.
"""

from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import List, Optional, Union

from . import hijri as _hijri
from .holidays import UpcomingHoliday, upcoming_holidays as _upcoming_holidays
from .methods import AsrMethod, HighLatitudeRule
from .navigator import PrayerEntry, current_prayer, next_prayer
from .prayer_engine import PrayerTimeSet, calculate
from .solar import GeoCoordinate


def calculate_prayer_times(
    latitude: float,
    longitude: float,
    day: Union[date, datetime],
    method_name: Optional[str] = None,
    *,
    asr_method: Optional[AsrMethod] = None,
    high_latitude_rule: Optional[HighLatitudeRule] = None,
    tz: Union[str, tzinfo, None] = None,
) -> PrayerTimeSet:
    coordinate = GeoCoordinate(latitude, longitude)
    return calculate(
        coordinate,
        day,
        method_name,
        asr_method=asr_method,
        high_latitude_rule=high_latitude_rule,
        tz=tz,
    )


def get_next_prayer(
    times: PrayerTimeSet,
    now: datetime,
    coordinate: Optional[GeoCoordinate] = None,
) -> PrayerEntry:
    return next_prayer(times, now, coordinate)


def get_current_prayer(times: PrayerTimeSet, now: datetime) -> Optional[PrayerEntry]:
    return current_prayer(times, now)


def get_hijri_date(day: Union[date, datetime]) -> _hijri.HijriDate:
    return _hijri.to_hijri(day)


def is_ramadan(day: Union[date, datetime]) -> bool:
    return _hijri.is_ramadan(day)


def days_until_ramadan(day: Union[date, datetime]) -> int:
    return _hijri.days_until_ramadan(day)


def upcoming_holidays(day: Union[date, datetime], limit: int = 3) -> List[UpcomingHoliday]:
    return _upcoming_holidays(day, limit)
