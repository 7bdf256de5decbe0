"""Low-precision solar position helpers used by the prayer-time engine.

All angles are in degrees and all times in hours. The formulas follow the
Astronomical Almanac approximation, which is accurate to about a minute of
time between 1950 and 2050 and degrades gracefully outside that window.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from math import floor
from typing import Optional, Tuple

from .errors import InvalidCoordinate

J2000 = 2451545.0

# Standard refraction plus solar semi-diameter at the horizon.
RISE_SET_ALTITUDE = -0.833


def dtr(d: float) -> float:
    return (d * math.pi) / 180.0


def rtd(r: float) -> float:
    return (r * 180.0) / math.pi


def fix_angle(a: float) -> float:
    return a - 360.0 * math.floor(a / 360.0)


def fix_hour(h: float) -> float:
    return h - 24.0 * math.floor(h / 24.0)


def ensure_aware(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def julian_day(dt_utc: datetime) -> float:
    """Return the astronomical Julian Day number for a UTC moment."""

    dt_utc = ensure_aware(dt_utc).astimezone(timezone.utc)

    year = dt_utc.year
    month = dt_utc.month
    day = dt_utc.day + (
        dt_utc.hour / 24.0
        + dt_utc.minute / 1440.0
        + dt_utc.second / 86400.0
        + dt_utc.microsecond / 86400_000_000.0
    )

    if month <= 2:
        year -= 1
        month += 12

    a = floor(year / 100)
    b = 2 - a + floor(a / 4)

    return (
        floor(365.25 * (year + 4716))
        + floor(30.6001 * (month + 1))
        + day
        + b
        - 1524.5
    )


def julian_day_for_date(day: date) -> float:
    """Julian Day at 00:00 UTC of a calendar date."""

    return julian_day(datetime(day.year, day.month, day.day, tzinfo=timezone.utc))


def sun_position(jd: float) -> Tuple[float, float]:
    """Return ``(declination, equation_of_time)`` for a Julian Day.

    Declination is in degrees, the equation of time in hours.
    """

    d = jd - J2000
    g = fix_angle(357.529 + 0.98560028 * d)
    q = fix_angle(280.459 + 0.98564736 * d)
    ecl_lon = fix_angle(q + 1.915 * math.sin(dtr(g)) + 0.020 * math.sin(dtr(2 * g)))
    obliquity = 23.439 - 0.00000036 * d

    ra = rtd(math.atan2(math.cos(dtr(obliquity)) * math.sin(dtr(ecl_lon)), math.cos(dtr(ecl_lon)))) / 15.0
    ra = fix_hour(ra)
    eqt = q / 15.0 - ra
    # q/15 and ra straddle the 0h/24h seam for part of the year
    eqt = (eqt + 12.0) % 24.0 - 12.0
    decl = rtd(math.asin(math.sin(dtr(obliquity)) * math.sin(dtr(ecl_lon))))
    return decl, eqt


def hour_angle(altitude: float, latitude: float, declination: float) -> Optional[float]:
    """Hours between solar transit and the moment the sun sits at ``altitude``.

    ``altitude`` is negative below the horizon. Returns ``None`` when the sun
    never reaches that altitude on the given day.
    """

    denominator = math.cos(dtr(latitude)) * math.cos(dtr(declination))
    if abs(denominator) < 1e-12:
        return None
    cos_h = (math.sin(dtr(altitude)) - math.sin(dtr(latitude)) * math.sin(dtr(declination))) / denominator
    if cos_h < -1.0 or cos_h > 1.0:
        return None
    return rtd(math.acos(cos_h)) / 15.0


def asr_altitude(shadow_factor: int, latitude: float, declination: float) -> Optional[float]:
    """Sun altitude at which an object's shadow is ``shadow_factor`` times its
    length plus its noon shadow. ``None`` when the sun stays below the horizon
    at noon."""

    cot_alt = shadow_factor + math.tan(dtr(abs(latitude - declination)))
    if cot_alt <= 0:
        return None
    return rtd(math.atan(1.0 / cot_alt))


@dataclass(frozen=True)
class GeoCoordinate:
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        lat, lon = self.latitude, self.longitude
        if lat is None or lon is None or math.isnan(lat) or math.isnan(lon):
            raise InvalidCoordinate(lat, lon)
        if not (-90.0 <= lat <= 90.0) or not (-180.0 <= lon <= 180.0):
            raise InvalidCoordinate(lat, lon)


@dataclass(frozen=True)
class SunTimes:
    declination: float
    equation_of_time: float
    # hours after 00:00 UTC of the requested date
    transit_time: float


def compute_sun_times(day: date, coordinate: GeoCoordinate) -> SunTimes:
    """Declination and equation of time at local solar noon, plus transit."""

    longitude = coordinate.longitude
    jd = julian_day_for_date(day) - longitude / (15 * 24) + 0.5
    decl, eqt = sun_position(jd)
    return SunTimes(
        declination=decl,
        equation_of_time=eqt,
        transit_time=12.0 - eqt - longitude / 15.0,
    )
