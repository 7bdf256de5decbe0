"""Registry of named prayer-time calculation conventions."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from .errors import UnknownMethod

logger = logging.getLogger(__name__)

DEFAULT_METHOD = "MuslimWorldLeague"


class AsrMethod(str, Enum):
    STANDARD = "Standard"
    HANAFI = "Hanafi"

    @property
    def shadow_factor(self) -> int:
        return 2 if self is AsrMethod.HANAFI else 1


class HighLatitudeRule(str, Enum):
    NONE = "None"
    MIDNIGHT_FRACTION = "MidnightFraction"
    SEVENTH_OF_NIGHT = "SeventhOfNight"
    ANGLE_BASED = "AngleBased"

    def night_portion(self, angle: float) -> float:
        if self is HighLatitudeRule.SEVENTH_OF_NIGHT:
            return 1 / 7.0
        if self is HighLatitudeRule.ANGLE_BASED:
            return angle / 60.0
        return 1 / 2.0


ADJUSTABLE = ("fajr", "sunrise", "dhuhr", "asr", "maghrib", "isha")


@dataclass(frozen=True)
class CalculationParameters:
    key: str
    display_name: str
    fajr_angle: float
    isha_angle: Optional[float] = None
    isha_interval_minutes: Optional[int] = None
    maghrib_angle: Optional[float] = None
    asr_method: AsrMethod = AsrMethod.STANDARD
    high_latitude_rule: HighLatitudeRule = HighLatitudeRule.MIDNIGHT_FRACTION
    dhuhr_offset_minutes: int = 0
    adjustments: Mapping[str, int] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if self.fajr_angle <= 0:
            raise ValueError(f"{self.key}: fajr angle must be positive")
        if self.isha_angle is None and self.isha_interval_minutes is None:
            raise ValueError(f"{self.key}: isha needs an angle or an interval")
        if self.isha_angle is not None and self.isha_angle <= 0:
            raise ValueError(f"{self.key}: isha angle must be positive")
        if self.maghrib_angle is not None and self.maghrib_angle <= 0:
            raise ValueError(f"{self.key}: maghrib angle must be positive")
        unknown = set(self.adjustments) - set(ADJUSTABLE)
        if unknown:
            raise ValueError(f"{self.key}: cannot adjust {sorted(unknown)}")
        object.__setattr__(self, "adjustments", MappingProxyType(dict(self.adjustments)))

    @property
    def method_name(self) -> str:
        return self.key

    def adjustment(self, prayer: str) -> int:
        return int(self.adjustments.get(prayer, 0))


def _build_registry() -> Dict[str, CalculationParameters]:
    methods = [
        CalculationParameters("MuslimWorldLeague", "Muslim World League", 18.0, 17.0, dhuhr_offset_minutes=1),
        CalculationParameters(
            "Egyptian", "Egyptian General Authority of Survey", 19.5, 17.5, dhuhr_offset_minutes=1
        ),
        CalculationParameters(
            "Karachi", "University of Islamic Sciences, Karachi", 18.0, 18.0, dhuhr_offset_minutes=1
        ),
        CalculationParameters("UmmAlQura", "Umm al-Qura University, Makkah", 18.5, isha_interval_minutes=90),
        CalculationParameters(
            "Dubai",
            "Dubai",
            18.2,
            18.2,
            adjustments={"sunrise": -3, "dhuhr": 3, "asr": 3, "maghrib": 3},
        ),
        CalculationParameters("Qatar", "Qatar", 18.0, isha_interval_minutes=90),
        CalculationParameters("Kuwait", "Kuwait", 18.0, 17.5),
        CalculationParameters(
            "MoonsightingCommittee",
            "Moonsighting Committee Worldwide",
            18.0,
            18.0,
            dhuhr_offset_minutes=5,
            adjustments={"maghrib": 3},
        ),
        CalculationParameters(
            "Singapore", "Majlis Ugama Islam Singapura", 20.0, 18.0, dhuhr_offset_minutes=1
        ),
        CalculationParameters(
            "Turkey",
            "Diyanet Isleri Baskanligi, Turkey",
            18.0,
            17.0,
            dhuhr_offset_minutes=5,
            adjustments={"sunrise": -7, "asr": 4, "maghrib": 7},
        ),
        CalculationParameters(
            "Tehran", "Institute of Geophysics, University of Tehran", 17.7, 14.0, maghrib_angle=4.5
        ),
        CalculationParameters(
            "NorthAmerica", "Islamic Society of North America", 15.0, 15.0, dhuhr_offset_minutes=1
        ),
    ]
    return {m.key: m for m in methods}


METHODS: Mapping[str, CalculationParameters] = MappingProxyType(_build_registry())

ALIASES = {
    "mwl": "MuslimWorldLeague",
    "egypt": "Egyptian",
    "makkah": "UmmAlQura",
    "isna": "NorthAmerica",
    "moonsighting": "MoonsightingCommittee",
    "diyanet": "Turkey",
}

_INDEX = {re.sub(r"[^a-z]", "", key.lower()): key for key in METHODS}
_INDEX.update(ALIASES)


def _normalise(name: str) -> str:
    return re.sub(r"[^a-z]", "", name.lower())


def lookup_method(name: Optional[str]) -> CalculationParameters:
    """Strict lookup; raises :class:`UnknownMethod` for unrecognised names."""

    if not isinstance(name, str) or not name.strip():
        raise UnknownMethod(name)
    key = _INDEX.get(_normalise(name))
    if key is None:
        raise UnknownMethod(name)
    return METHODS[key]


def resolve_method(name: Optional[str]) -> CalculationParameters:
    """Lenient lookup used at the service boundary.

    Missing names give the default silently; unknown names fall back to the
    Muslim World League parameters with a warning.
    """

    if name is None or (isinstance(name, str) and not name.strip()):
        return METHODS[DEFAULT_METHOD]
    try:
        return lookup_method(name)
    except UnknownMethod:
        logger.warning("prayer_method_unknown", extra={"method": name, "fallback": DEFAULT_METHOD})
        return METHODS[DEFAULT_METHOD]


def list_methods() -> List[Dict[str, object]]:
    rows: List[Dict[str, object]] = []
    for key, params in METHODS.items():
        rows.append(
            {
                "key": key,
                "name": params.display_name,
                "fajr_angle": params.fajr_angle,
                "isha_angle": params.isha_angle,
                "isha_interval_minutes": params.isha_interval_minutes,
                "maghrib_angle": params.maghrib_angle,
                "dhuhr_offset_minutes": params.dhuhr_offset_minutes,
                "adjustments": dict(params.adjustments),
            }
        )
    return rows


def coerce_asr_method(value: Optional[object]) -> Optional[AsrMethod]:
    """Accept enum members or lenient strings ("hanafi", "shafi", ...)."""

    if value is None or isinstance(value, AsrMethod):
        return value
    text = str(value).strip().lower()
    if text == "hanafi":
        return AsrMethod.HANAFI
    if text in {"standard", "shafi", "maliki", "hanbali"}:
        return AsrMethod.STANDARD
    raise ValueError(f"Unknown asr method: {value}")


def coerce_high_latitude_rule(value: Optional[object]) -> Optional[HighLatitudeRule]:
    if value is None or isinstance(value, HighLatitudeRule):
        return value
    wanted = _normalise(str(value))
    for rule in HighLatitudeRule:
        if _normalise(rule.value) == wanted:
            return rule
    raise ValueError(f"Unknown high latitude rule: {value}")
