"""Fixed Islamic observances and their upcoming Gregorian dates."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Tuple, Union

from .hijri import HijriDate, as_date, to_gregorian, to_hijri


@dataclass(frozen=True)
class Holiday:
    name: str
    hijri_month: int
    hijri_day: int
    description: str


@dataclass(frozen=True)
class UpcomingHoliday:
    holiday: Holiday
    date: date
    hijri_year: int
    days_until: int

    @property
    def name(self) -> str:
        return self.holiday.name

    @property
    def hijri_date(self) -> HijriDate:
        return HijriDate(self.hijri_year, self.holiday.hijri_month, self.holiday.hijri_day)


HOLIDAYS: Tuple[Holiday, ...] = (
    Holiday("Islamic New Year", 1, 1, "Beginning of the Islamic calendar year"),
    Holiday("Day of Ashura", 1, 10, "Day of remembrance in Islam"),
    Holiday("Mawlid an-Nabi", 3, 12, "Birth of Prophet Muhammad (PBUH)"),
    Holiday("Laylat al-Mi'raj", 7, 27, "Night Journey of Prophet Muhammad (PBUH)"),
    Holiday("Laylat al-Bara'at", 8, 15, "Night of Forgiveness"),
    Holiday("Start of Ramadan", 9, 1, "Beginning of the holy month of fasting"),
    Holiday("Laylat al-Qadr", 9, 27, "Night of Power (approximate date)"),
    Holiday("Eid al-Fitr", 10, 1, "Festival of Breaking the Fast"),
    Holiday("Eid al-Adha", 12, 10, "Festival of Sacrifice"),
)


def upcoming_holidays(value: Union[date, datetime], limit: int = 3) -> List[UpcomingHoliday]:
    """Holidays on or after ``value`` from the current and next Hijri year,
    earliest first, at most ``limit`` of them."""

    today = as_date(value)
    if limit <= 0:
        return []
    current_year = to_hijri(today).year

    found: List[UpcomingHoliday] = []
    for year in (current_year, current_year + 1):
        for holiday in HOLIDAYS:
            when = to_gregorian(HijriDate(year, holiday.hijri_month, holiday.hijri_day))
            if when >= today:
                found.append(UpcomingHoliday(holiday, when, year, (when - today).days))

    found.sort(key=lambda item: item.date)
    return found[:limit]
