from datetime import date

from salat.services.core import upcoming_holidays
from salat.services.hijri import HijriDate
from salat.services.holidays import HOLIDAYS


def test_registry():
    assert len(HOLIDAYS) == 9
    names = {h.name for h in HOLIDAYS}
    assert {"Eid al-Fitr", "Eid al-Adha", "Start of Ramadan", "Islamic New Year"} <= names


def test_next_three_from_mid_ramadan():
    items = upcoming_holidays(date(2024, 3, 15))
    assert [i.name for i in items] == ["Laylat al-Qadr", "Eid al-Fitr", "Eid al-Adha"]
    assert items[0].date == date(2024, 4, 6)
    assert items[1].date == date(2024, 4, 10)
    assert items[1].hijri_date == HijriDate(1445, 10, 1)
    assert items[1].days_until == 26


def test_sorted_and_never_in_the_past():
    for day in (date(2023, 1, 1), date(2024, 7, 20), date(2025, 12, 31), date(2030, 6, 1)):
        items = upcoming_holidays(day)
        assert len(items) == 3
        assert all(i.date >= day for i in items)
        assert [i.date for i in items] == sorted(i.date for i in items)


def test_holiday_today_is_included():
    items = upcoming_holidays(date(2024, 4, 10))
    assert items[0].name == "Eid al-Fitr"
    assert items[0].days_until == 0


def test_limit_spans_into_next_year():
    items = upcoming_holidays(date(2024, 3, 15), limit=12)
    assert len(items) == 12
    assert items[-1].hijri_year == 1446
    assert upcoming_holidays(date(2024, 3, 15), limit=0) == []
