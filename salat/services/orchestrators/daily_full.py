"""Build the daily prayer viewmodel.

Prayer times are deterministic per (date, place, options), so the computed
``PrayerTimeSet`` is cached; the navigation part (current/next prayer,
countdown) depends on the wall clock and is rebuilt on every call.
"""

from __future__ import annotations

import logging
import os
import time
from datetime import date as date_cls, datetime
from typing import Any, Dict, Optional, List, Tuple

from zoneinfo import ZoneInfo

from ...schemas.prayer_viewmodel import (
    HeaderVM,
    HijriVM,
    HolidayVM,
    PlaceVM,
    PrayerDayViewModel,
    PrayerEntryVM,
    PrayerTimesVM,
    RamadanVM,
    RemainingVM,
    ReminderVM,
    RemindersResponse,
)
from ..hijri import HijriDate, days_until_ramadan, is_ramadan, to_hijri
from ..holidays import UpcomingHoliday, upcoming_holidays
from ..methods import DEFAULT_METHOD, coerce_asr_method, coerce_high_latitude_rule
from ..navigator import PrayerEntry, current_prayer, next_prayer, time_remaining
from ..prayer_engine import TIME_FIELDS, PrayerTimeSet, calculate
from ..reminders import NotificationScheduler, NotificationSettings, build_reminders, schedule_prayer_reminders
from ..solar import GeoCoordinate, ensure_aware
from ..util.place_defaults import normalize_place

logger = logging.getLogger(__name__)


CACHE: Dict[str, Tuple[float, PrayerTimeSet]] = {}


def _ttl_seconds() -> float:
    return float(os.getenv("PRAYER_CACHE_TTL", "3600"))


def _format_iso(dt: datetime) -> str:
    return dt.isoformat()


def _resolve_date(date_str: Optional[str], tz: ZoneInfo) -> date_cls:
    if date_str:
        return date_cls.fromisoformat(date_str)
    return datetime.now(tz).date()


def _normalize_options(options: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    opts = dict(options or {})
    opts["method"] = opts.get("method") or os.getenv("DEFAULT_METHOD", DEFAULT_METHOD)
    opts["asr_method"] = coerce_asr_method(opts.get("asr_method"))
    opts["high_latitude_rule"] = coerce_high_latitude_rule(opts.get("high_latitude_rule"))
    opts["holiday_limit"] = int(opts.get("holiday_limit", 3))
    return opts


def _build_cache_key(date_value: date_cls, place: Dict[str, Any], options: Dict[str, Any]) -> str:
    asr = options["asr_method"].value if options["asr_method"] else "-"
    rule = options["high_latitude_rule"].value if options["high_latitude_rule"] else "-"
    lat = float(place["lat"])
    lon = float(place["lon"])
    return f"prayer:{date_value.isoformat()}:{lat:.4f}:{lon:.4f}:{place['tz']}:{options['method']}:{asr}:{rule}"


def compute_times(date_value: date_cls, place: Dict[str, Any], options: Dict[str, Any]) -> PrayerTimeSet:
    key = _build_cache_key(date_value, place, options)
    cached = CACHE.get(key)
    now = time.time()
    if cached and now - cached[0] < _ttl_seconds():
        return cached[1]

    coordinate = GeoCoordinate(float(place["lat"]), float(place["lon"]))
    times = calculate(
        coordinate,
        date_value,
        options["method"],
        asr_method=options["asr_method"],
        high_latitude_rule=options["high_latitude_rule"],
        tz=ZoneInfo(place["tz"]),
    )
    ttl = _ttl_seconds()
    for stale in [k for k, (ts, _) in list(CACHE.items()) if now - ts >= ttl]:
        CACHE.pop(stale, None)
    CACHE[key] = (now, times)
    return times


def _entry_vm(entry: Optional[PrayerEntry]) -> Optional[PrayerEntryVM]:
    if entry is None:
        return None
    return PrayerEntryVM(name=entry.name.value, time=_format_iso(entry.time), is_next_day=entry.is_next_day)


def hijri_vm(value: HijriDate) -> HijriVM:
    return HijriVM(
        year=value.year,
        month=value.month,
        day=value.day,
        month_name=value.month_name,
        formatted=value.formatted,
    )


def holiday_vms(items: List[UpcomingHoliday]) -> List[HolidayVM]:
    return [
        HolidayVM(
            name=item.holiday.name,
            description=item.holiday.description,
            hijri_month=item.holiday.hijri_month,
            hijri_day=item.holiday.hijri_day,
            hijri_year=item.hijri_year,
            date=item.date.isoformat(),
            days_until=item.days_until,
        )
        for item in items
    ]


def times_vm(times: PrayerTimeSet) -> PrayerTimesVM:
    payload = {name: _format_iso(getattr(times, name)) for name in TIME_FIELDS}
    return PrayerTimesVM(
        **payload,
        high_latitude_adjusted=sorted(times.high_latitude_adjusted),
        ordered=times.is_ordered,
    )


def _navigation_now(target_date: date_cls, tz: ZoneInfo, now: Optional[datetime]) -> datetime:
    now = ensure_aware(now or datetime.now(tz)).astimezone(tz)
    if now.date() == target_date:
        return now
    return datetime.combine(target_date, datetime.min.time(), tzinfo=tz)


def _prepare(
    date_str: Optional[str],
    place: Optional[Dict[str, Any]],
    options: Optional[Dict[str, Any]],
) -> Tuple[Dict[str, Any], Dict[str, Any], ZoneInfo, date_cls, Dict[str, Any]]:
    eff_place, flags = normalize_place(place)
    tz = ZoneInfo(eff_place["tz"])
    target_date = _resolve_date(date_str, tz)
    opts = _normalize_options(options)
    if flags["default_reason"]:
        logger.info(
            "prayer_place_defaults_applied",
            extra={"reason": flags["default_reason"], "tz": eff_place["tz"]},
        )
    return eff_place, flags, tz, target_date, opts


def build_viewmodel(
    date_str: Optional[str],
    place: Optional[Dict[str, Any]],
    options: Optional[Dict[str, Any]],
    now: Optional[datetime] = None,
) -> PrayerDayViewModel:
    """Daily view model for ``date_str`` at ``place``.

    Navigation (current/next prayer, countdown) follows ``now`` when it falls
    on the requested day at the place; for any other day it is read from the
    start of that day.
    """

    eff_place, flags, tz, target_date, opts = _prepare(date_str, place, options)
    times = compute_times(target_date, eff_place, opts)
    coordinate = times.coordinate
    now = _navigation_now(target_date, tz, now)

    upcoming = next_prayer(times, now, coordinate)
    params = times.parameters
    header = HeaderVM(
        date_local=target_date.isoformat(),
        weekday=target_date.strftime("%A"),
        tz=eff_place["tz"],
        place=PlaceVM(lat=eff_place["lat"], lon=eff_place["lon"], tz=eff_place["tz"], label=eff_place["label"]),
        method=params.key,
        method_name=params.display_name,
        asr_method=params.asr_method.value,
        high_latitude_rule=params.high_latitude_rule.value,
        meta=flags,
    )
    remaining = time_remaining(upcoming.time, now)
    return PrayerDayViewModel(
        header=header,
        times=times_vm(times),
        current_prayer=_entry_vm(current_prayer(times, now)),
        next_prayer=_entry_vm(upcoming),
        time_remaining=RemainingVM(hours=remaining.hours, minutes=remaining.minutes),
        hijri=hijri_vm(to_hijri(target_date)),
        ramadan=RamadanVM(is_ramadan=is_ramadan(target_date), days_until=days_until_ramadan(target_date)),
        holidays=holiday_vms(upcoming_holidays(target_date, opts["holiday_limit"])),
    )


def build_reminders_response(
    date_str: Optional[str],
    place: Optional[Dict[str, Any]],
    options: Optional[Dict[str, Any]],
    settings: Optional[NotificationSettings] = None,
    now: Optional[datetime] = None,
) -> RemindersResponse:
    eff_place, _flags, tz, target_date, opts = _prepare(date_str, place, options)
    times = compute_times(target_date, eff_place, opts)
    reminders = build_reminders(times, now or datetime.now(tz), settings, eff_place["label"])
    return RemindersResponse(
        date_local=target_date.isoformat(),
        tz=eff_place["tz"],
        reminders=[
            ReminderVM(when=_format_iso(r.when), title=r.title, body=r.body, data=dict(r.data))
            for r in reminders
        ],
    )


def schedule_day_reminders(
    scheduler: NotificationScheduler,
    date_str: Optional[str],
    place: Optional[Dict[str, Any]],
    options: Optional[Dict[str, Any]],
    settings: Optional[NotificationSettings] = None,
    now: Optional[datetime] = None,
) -> List[str]:
    """Replace whatever ``scheduler`` holds with the day's remaining reminders."""

    eff_place, _flags, tz, target_date, opts = _prepare(date_str, place, options)
    times = compute_times(target_date, eff_place, opts)
    now = ensure_aware(now or datetime.now(tz))
    return schedule_prayer_reminders(scheduler, times, now, settings, eff_place["label"])
