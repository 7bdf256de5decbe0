from datetime import date, datetime, timedelta

import pytest

from salat.services.core import days_until_ramadan, get_hijri_date, is_ramadan
from salat.services.errors import HijriConversionError
from salat.services.hijri import (
    HijriDate,
    is_leap_year,
    month_length,
    month_name,
    ramadan_window,
    to_gregorian,
    to_hijri,
)


def test_known_dates():
    assert to_hijri(date(2024, 3, 11)) == HijriDate(1445, 9, 1)
    assert to_hijri(date(2024, 4, 10)) == HijriDate(1445, 10, 1)
    assert to_gregorian(HijriDate(1446, 9, 1)) == date(2025, 3, 1)
    assert to_gregorian(HijriDate(1, 1, 1)) == date(622, 7, 19)


def test_round_trip_across_centuries():
    day = date(1900, 1, 1)
    while day < date(2100, 1, 1):
        assert to_gregorian(to_hijri(day)) == day
        day += timedelta(days=97)


def test_consecutive_days_advance_by_one():
    previous = to_hijri(date(2023, 12, 31))
    for offset in range(1, 400):
        current = to_hijri(date(2023, 12, 31) + timedelta(days=offset))
        assert current > previous
        if current.day != 1:
            assert (current.year, current.month, current.day - 1) == (previous.year, previous.month, previous.day)
        previous = current


def test_month_lengths_and_leap_years():
    assert [y for y in range(1, 31) if is_leap_year(y)] == [2, 5, 7, 10, 13, 16, 18, 21, 24, 26, 29]
    assert month_length(1445, 1) == 30
    assert month_length(1445, 2) == 29
    assert month_length(1445, 12) == 30
    assert month_length(1446, 12) == 29


def test_formatting():
    hijri = get_hijri_date(datetime(2024, 3, 15, 22, 0))
    assert hijri.formatted == "5 Ramadan 1445 AH"
    assert str(hijri) == hijri.formatted
    assert month_name(13) == "Unknown"


@pytest.mark.parametrize("parts", [(1445, 13, 1), (1445, 0, 1), (1445, 2, 30), (0, 1, 1), (1445, 1, 0)])
def test_invalid_hijri_dates(parts):
    with pytest.raises(HijriConversionError):
        HijriDate(*parts)


def test_dates_before_epoch_rejected():
    with pytest.raises(HijriConversionError):
        to_hijri(date(600, 1, 1))
    with pytest.raises(HijriConversionError):
        to_hijri("2024-03-11")


def test_ramadan_flag_matches_countdown():
    day = date(2024, 1, 1)
    previous = None
    for _ in range(800):
        remaining = days_until_ramadan(day)
        assert is_ramadan(day) == (remaining == 0)
        if previous is not None and previous > 0:
            assert remaining == previous - 1
        previous = remaining
        day += timedelta(days=1)


def test_days_until_ramadan_edges():
    assert days_until_ramadan(date(2024, 3, 10)) == 1
    assert days_until_ramadan(date(2024, 3, 11)) == 0
    assert days_until_ramadan(date(2024, 4, 9)) == 0
    assert days_until_ramadan(date(2024, 4, 10)) == (date(2025, 3, 1) - date(2024, 4, 10)).days


def test_ramadan_window():
    first, last = ramadan_window(1445)
    assert first == date(2024, 3, 11)
    assert last == date(2024, 4, 9)
