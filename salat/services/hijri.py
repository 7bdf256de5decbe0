"""Tabular (arithmetic) Hijri calendar.

Uses the civil 30-year cycle with leap years 2, 5, 7, 10, 13, 16, 18, 21,
24, 26 and 29, epoch 1 Muharram 1 AH = 16 July 622 (Julian). Dates can differ
by a day or two from moon-sighting based calendars; that is a limitation of
any arithmetic calendar, not of this implementation.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Union

from .errors import HijriConversionError

# Proleptic Gregorian ordinal of 1 Muharram 1 AH (Julian Day Number 1948440).
EPOCH_ORDINAL = 227015

RAMADAN = 9

MONTH_NAMES = (
    "Muharram",
    "Safar",
    "Rabi' al-awwal",
    "Rabi' al-thani",
    "Jumada al-awwal",
    "Jumada al-thani",
    "Rajab",
    "Sha'ban",
    "Ramadan",
    "Shawwal",
    "Dhu al-Qi'dah",
    "Dhu al-Hijjah",
)


def is_leap_year(year: int) -> bool:
    return (14 + 11 * year) % 30 < 11


def month_length(year: int, month: int) -> int:
    if month == 12 and is_leap_year(year):
        return 30
    return 30 if month % 2 == 1 else 29


def month_name(month: int) -> str:
    if 1 <= month <= 12:
        return MONTH_NAMES[month - 1]
    return "Unknown"


@dataclass(frozen=True, order=True)
class HijriDate:
    year: int
    month: int
    day: int

    def __post_init__(self) -> None:
        if not all(isinstance(v, int) and not isinstance(v, bool) for v in (self.year, self.month, self.day)):
            raise HijriConversionError(f"Hijri date parts must be integers: {self.year}-{self.month}-{self.day}")
        if self.year < 1:
            raise HijriConversionError(f"Hijri year must be >= 1: {self.year}")
        if not 1 <= self.month <= 12:
            raise HijriConversionError(f"Hijri month out of range: {self.month}")
        if not 1 <= self.day <= month_length(self.year, self.month):
            raise HijriConversionError(
                f"Day {self.day} out of range for {month_name(self.month)} {self.year}"
            )

    @property
    def month_name(self) -> str:
        return month_name(self.month)

    @property
    def formatted(self) -> str:
        return f"{self.day} {self.month_name} {self.year} AH"

    def __str__(self) -> str:
        return self.formatted


def _first_of_year(year: int) -> int:
    return EPOCH_ORDINAL + (year - 1) * 354 + (3 + 11 * year) // 30


def _ordinal(year: int, month: int, day: int) -> int:
    return _first_of_year(year) + (59 * (month - 1) + 1) // 2 + day - 1


def as_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise HijriConversionError(f"Expected a date, got {type(value).__name__}")


def to_hijri(value: Union[date, datetime]) -> HijriDate:
    """Convert a Gregorian date (datetimes use their own calendar date)."""

    ordinal = as_date(value).toordinal()
    if ordinal < EPOCH_ORDINAL:
        raise HijriConversionError(f"{value} precedes the Hijri epoch")

    year = (30 * (ordinal - EPOCH_ORDINAL) + 10646) // 10631
    while _first_of_year(year + 1) <= ordinal:
        year += 1
    while _first_of_year(year) > ordinal:
        year -= 1

    month = 12
    while month > 1 and _ordinal(year, month, 1) > ordinal:
        month -= 1
    day = ordinal - _ordinal(year, month, 1) + 1
    return HijriDate(year, month, day)


def to_gregorian(hijri: HijriDate) -> date:
    ordinal = _ordinal(hijri.year, hijri.month, hijri.day)
    try:
        return date.fromordinal(ordinal)
    except (ValueError, OverflowError) as exc:
        raise HijriConversionError(f"{hijri} is outside the supported Gregorian range") from exc


def is_ramadan(value: Union[date, datetime]) -> bool:
    return to_hijri(value).month == RAMADAN


def days_until_ramadan(value: Union[date, datetime]) -> int:
    """Days from ``value`` to the next 1 Ramadan; 0 while Ramadan is running."""

    today = as_date(value)
    current = to_hijri(today)
    if current.month == RAMADAN:
        return 0
    year = current.year if current.month < RAMADAN else current.year + 1
    start = to_gregorian(HijriDate(year, RAMADAN, 1))
    return max(0, (start - today).days)


def ramadan_window(hijri_year: int) -> tuple[date, date]:
    """First and last Gregorian day of Ramadan in ``hijri_year``."""

    first = to_gregorian(HijriDate(hijri_year, RAMADAN, 1))
    return first, first + timedelta(days=month_length(hijri_year, RAMADAN) - 1)
