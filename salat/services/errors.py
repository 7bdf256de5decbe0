"""Typed failures raised by the prayer-time and Hijri services."""

from __future__ import annotations

from typing import Iterable, Tuple


class PrayerTimesError(Exception):
    """Base class for every error raised by the core services."""


class InvalidCoordinate(PrayerTimesError, ValueError):
    def __init__(self, latitude: float, longitude: float) -> None:
        super().__init__(
            f"Coordinate out of range: lat={latitude!r} (expected -90..90), "
            f"lon={longitude!r} (expected -180..180)"
        )
        self.latitude = latitude
        self.longitude = longitude


class NoSolarSolution(PrayerTimesError):
    """The sun never reaches the requested angle and no fallback is configured."""

    def __init__(self, prayers: Iterable[str]) -> None:
        self.prayers: Tuple[str, ...] = tuple(prayers)
        super().__init__(
            "No solar solution for " + ", ".join(self.prayers)
            + " (high-latitude fallback disabled)"
        )


class UnknownMethod(PrayerTimesError, KeyError):
    def __init__(self, name: object) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown calculation method: {self.name!r}"


class HijriConversionError(PrayerTimesError, ValueError):
    pass
