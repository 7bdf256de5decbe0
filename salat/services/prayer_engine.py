"""Compute the daily prayer schedule for one location and calendar date.

Times are worked out in local mean solar hours (hours after local mean
midnight) following the classic PrayTimes approach: each event is evaluated
once with the solar declination and equation of time at a first-guess hour,
then shifted to UTC by the longitude. Unsolvable hour angles are replaced
according to the configured high-latitude rule and reported in
``PrayerTimeSet.high_latitude_adjusted``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Set, Tuple, Union
from zoneinfo import ZoneInfo

from .errors import NoSolarSolution
from .methods import (
    AsrMethod,
    CalculationParameters,
    HighLatitudeRule,
    resolve_method,
)
from .solar import (
    RISE_SET_ALTITUDE,
    GeoCoordinate,
    asr_altitude,
    fix_hour,
    hour_angle,
    julian_day_for_date,
    sun_position,
)

logger = logging.getLogger(__name__)

# First-guess local solar hours for each event.
_GUESS = {
    "fajr": 5.0,
    "sunrise": 6.0,
    "dhuhr": 12.0,
    "asr": 13.0,
    "sunset": 18.0,
    "maghrib": 18.0,
    "isha": 18.0,
}

# Step used when searching for the nearest latitude with a sunrise/sunset.
_LATITUDE_STEP = 0.5


class Prayer(str, Enum):
    FAJR = "Fajr"
    DHUHR = "Dhuhr"
    ASR = "Asr"
    MAGHRIB = "Maghrib"
    ISHA = "Isha"

    @property
    def field(self) -> str:
        return self.value.lower()


PRAYER_ORDER: Tuple[Prayer, ...] = (
    Prayer.FAJR,
    Prayer.DHUHR,
    Prayer.ASR,
    Prayer.MAGHRIB,
    Prayer.ISHA,
)

TIME_FIELDS = ("fajr", "sunrise", "dhuhr", "asr", "maghrib", "isha", "qiyam", "midnight")


@dataclass(frozen=True)
class PrayerTimeSet:
    date: date
    coordinate: GeoCoordinate
    method_name: str
    fajr: datetime
    sunrise: datetime
    dhuhr: datetime
    asr: datetime
    maghrib: datetime
    isha: datetime
    qiyam: datetime
    midnight: datetime
    parameters: CalculationParameters = field(repr=False)
    high_latitude_adjusted: FrozenSet[str] = frozenset()

    def time_of(self, prayer: Prayer) -> datetime:
        return getattr(self, prayer.field)

    def prayers(self) -> List[Tuple[Prayer, datetime]]:
        """The five timed prayers in chronological order."""
        return [(p, self.time_of(p)) for p in PRAYER_ORDER]

    @property
    def is_ordered(self) -> bool:
        return (
            self.fajr < self.sunrise < self.dhuhr < self.asr < self.maghrib < self.isha
            and self.isha <= self.qiyam
        )

    @property
    def tzinfo(self) -> Optional[tzinfo]:
        return self.fajr.tzinfo

    def as_dict(self) -> Dict[str, datetime]:
        return {name: getattr(self, name) for name in TIME_FIELDS}


def _resolve_tz(tz: Union[str, tzinfo, None]) -> Optional[tzinfo]:
    if tz is None or isinstance(tz, tzinfo):
        return tz
    return ZoneInfo(tz)


class _SolarDay:
    """Solar events of one day in local mean hours."""

    def __init__(self, day: date, coordinate: GeoCoordinate) -> None:
        self.lat = coordinate.latitude
        self.lng = coordinate.longitude
        self.jdate = julian_day_for_date(day) - self.lng / (15 * 24)

    def _sun(self, guess: float) -> Tuple[float, float]:
        return sun_position(self.jdate + guess / 24.0)

    def transit(self, guess: float) -> float:
        _, eqt = self._sun(guess)
        return 12.0 - eqt

    def at_altitude(
        self, altitude: float, guess: float, before_transit: bool, latitude: Optional[float] = None
    ) -> Optional[float]:
        lat = self.lat if latitude is None else latitude
        decl, eqt = self._sun(guess)
        h = hour_angle(altitude, lat, decl)
        if h is None:
            return None
        noon = 12.0 - eqt
        return noon - h if before_transit else noon + h

    def asr(self, factor: int, guess: float, latitude: Optional[float] = None) -> Optional[float]:
        lat = self.lat if latitude is None else latitude
        decl, _ = self._sun(guess)
        altitude = asr_altitude(factor, lat, decl)
        if altitude is None:
            return None
        return self.at_altitude(altitude, guess, False, latitude=lat)


def _horizon_events(solar: _SolarDay, factor: int, latitude: float) -> Dict[str, Optional[float]]:
    return {
        "sunrise": solar.at_altitude(RISE_SET_ALTITUDE, _GUESS["sunrise"], True, latitude),
        "sunset": solar.at_altitude(RISE_SET_ALTITUDE, _GUESS["sunset"], False, latitude),
        "asr": solar.asr(factor, _GUESS["asr"], latitude),
    }


def _nearest_solvable(solar: _SolarDay, factor: int) -> Tuple[float, Dict[str, Optional[float]]]:
    latitude = solar.lat
    step = math.copysign(_LATITUDE_STEP, latitude)
    while abs(latitude) > _LATITUDE_STEP:
        latitude -= step
        events = _horizon_events(solar, factor, latitude)
        if all(v is not None for v in events.values()):
            return latitude, events
    return 0.0, _horizon_events(solar, factor, 0.0)


def _clamp_to_night(
    value: Optional[float],
    base: float,
    angle: float,
    night: float,
    rule: HighLatitudeRule,
    before: bool,
) -> Tuple[float, bool]:
    portion = rule.night_portion(angle) * night
    if value is None:
        return (base - portion if before else base + portion), True
    diff = base - value if before else value - base
    if diff > portion:
        return (base - portion if before else base + portion), True
    return value, False


def _solar_hours(day: date, coordinate: GeoCoordinate, params: CalculationParameters) -> Tuple[Dict[str, float], Set[str]]:
    """Return event times in UTC hours after 00:00 UTC of ``day``."""

    solar = _SolarDay(day, coordinate)
    rule = params.high_latitude_rule
    factor = params.asr_method.shadow_factor
    adjusted: Set[str] = set()

    dhuhr = solar.transit(_GUESS["dhuhr"])

    events = _horizon_events(solar, factor, solar.lat)
    missing = [name for name, value in events.items() if value is None]
    if missing:
        if rule is HighLatitudeRule.NONE:
            raise NoSolarSolution("maghrib" if m == "sunset" else m for m in missing)
        eff_lat, fallback = _nearest_solvable(solar, factor)
        for name in missing:
            events[name] = fallback[name]
            adjusted.add("maghrib" if name == "sunset" else name)
        logger.info(
            "horizon_events_from_nearest_latitude",
            extra={"latitude": solar.lat, "effective_latitude": eff_lat, "events": missing},
        )
    sunrise = events["sunrise"]
    sunset = events["sunset"]
    asr = events["asr"]

    fajr = solar.at_altitude(-params.fajr_angle, _GUESS["fajr"], True)
    isha = None
    if params.isha_angle is not None:
        isha = solar.at_altitude(-params.isha_angle, _GUESS["isha"], False)
    maghrib = sunset
    if params.maghrib_angle is not None:
        maghrib = solar.at_altitude(-params.maghrib_angle, _GUESS["maghrib"], False)

    unsolved = [
        name
        for name, value, needed in (
            ("fajr", fajr, True),
            ("maghrib", maghrib, params.maghrib_angle is not None),
            ("isha", isha, params.isha_angle is not None),
        )
        if needed and value is None
    ]
    if rule is HighLatitudeRule.NONE:
        if unsolved:
            raise NoSolarSolution(unsolved)
    else:
        night = fix_hour(sunrise - sunset)
        fajr, changed = _clamp_to_night(fajr, sunrise, params.fajr_angle, night, rule, before=True)
        if changed:
            adjusted.add("fajr")
        if params.maghrib_angle is not None:
            maghrib, changed = _clamp_to_night(maghrib, sunset, params.maghrib_angle, night, rule, before=False)
            if changed:
                adjusted.add("maghrib")
        if params.isha_angle is not None:
            isha, changed = _clamp_to_night(isha, sunset, params.isha_angle, night, rule, before=False)
            if changed:
                adjusted.add("isha")

    if params.isha_interval_minutes is not None:
        isha = maghrib + params.isha_interval_minutes / 60.0

    local = {
        "fajr": fajr,
        "sunrise": sunrise,
        "dhuhr": dhuhr + params.dhuhr_offset_minutes / 60.0,
        "asr": asr,
        "maghrib": maghrib,
        "isha": isha,
    }
    utc_shift = solar.lng / 15.0
    hours = {
        name: value - utc_shift + params.adjustment(name) / 60.0
        for name, value in local.items()
    }
    return hours, adjusted


_SEQUENCE = ("fajr", "sunrise", "dhuhr", "asr", "maghrib", "isha")


def _minutes(hours: float) -> int:
    return round(hours * 60.0)


def _settle_order(hours: Dict[str, float], adjusted: Set[str], rule: HighLatitudeRule) -> None:
    """Keep Isha at or before Qiyam and flag any event left out of sequence.

    Low Isha angles at high latitudes can put Isha past the last third of a
    short night; it is clamped to Qiyam unless fallbacks are disabled.
    """

    if _minutes(hours["isha"]) > _minutes(hours["qiyam"]):
        if rule is not HighLatitudeRule.NONE:
            hours["isha"] = hours["qiyam"]
        adjusted.add("isha")
    for earlier, later in zip(_SEQUENCE, _SEQUENCE[1:]):
        if _minutes(hours[earlier]) >= _minutes(hours[later]):
            adjusted.update((earlier, later))


def _to_datetime(day: date, hours: float) -> datetime:
    base = datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
    return base + timedelta(minutes=_minutes(hours))


def calculate_with_parameters(
    coordinate: GeoCoordinate,
    day: Union[date, datetime],
    params: CalculationParameters,
    tz: Union[str, tzinfo, None] = None,
) -> PrayerTimeSet:
    if isinstance(day, datetime):
        day = day.date()
    target_tz = _resolve_tz(tz)

    hours, adjusted = _solar_hours(day, coordinate, params)
    next_hours, next_adjusted = _solar_hours(day + timedelta(days=1), coordinate, params)

    night = (next_hours["fajr"] + 24.0) - hours["maghrib"]
    hours["midnight"] = hours["maghrib"] + night / 2.0
    hours["qiyam"] = hours["maghrib"] + night * 2.0 / 3.0
    if "fajr" in next_adjusted:
        adjusted.update({"qiyam", "midnight"})
    _settle_order(hours, adjusted, params.high_latitude_rule)

    stamps = {name: _to_datetime(day, value) for name, value in hours.items()}
    if target_tz is not None:
        stamps = {name: value.astimezone(target_tz) for name, value in stamps.items()}

    times = PrayerTimeSet(
        date=day,
        coordinate=coordinate,
        method_name=params.key,
        parameters=params,
        high_latitude_adjusted=frozenset(adjusted),
        **stamps,
    )
    if adjusted:
        logger.info(
            "high_latitude_fallback_applied",
            extra={
                "date": day.isoformat(),
                "latitude": coordinate.latitude,
                "rule": params.high_latitude_rule.value,
                "adjusted": sorted(adjusted),
            },
        )
    return times


def calculate(
    coordinate: GeoCoordinate,
    day: Union[date, datetime],
    method_name: Optional[str] = None,
    *,
    asr_method: Optional[AsrMethod] = None,
    high_latitude_rule: Optional[HighLatitudeRule] = None,
    tz: Union[str, tzinfo, None] = None,
) -> PrayerTimeSet:
    """Prayer times for ``coordinate`` on ``day`` using a named method.

    Unknown method names fall back to the Muslim World League parameters.
    ``asr_method`` and ``high_latitude_rule`` override the method defaults.
    Raises :class:`NoSolarSolution` only when the rule is ``None`` and the sun
    never reaches one of the required angles.
    """

    params = resolve_method(method_name)
    overrides = {}
    if asr_method is not None:
        overrides["asr_method"] = asr_method
    if high_latitude_rule is not None:
        overrides["high_latitude_rule"] = high_latitude_rule
    if overrides:
        params = replace(params, **overrides)
    return calculate_with_parameters(coordinate, day, params, tz=tz)
