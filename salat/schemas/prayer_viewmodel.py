"""Prayer and Hijri viewmodel schemas used by the API endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field
from typing import Any, Optional, List, Dict


class PlaceVM(BaseModel):
    lat: float
    lon: float
    tz: str
    label: Optional[str] = None


class HeaderVM(BaseModel):
    date_local: str
    weekday: str
    tz: str
    place: PlaceVM
    method: str
    method_name: str
    asr_method: str
    high_latitude_rule: str
    meta: Optional[Dict[str, Any]] = None


class PrayerTimesVM(BaseModel):
    fajr: str
    sunrise: str
    dhuhr: str
    asr: str
    maghrib: str
    isha: str
    qiyam: str
    midnight: str
    high_latitude_adjusted: List[str] = Field(default_factory=list)
    ordered: bool


class PrayerEntryVM(BaseModel):
    name: str
    time: str
    is_next_day: bool = False


class RemainingVM(BaseModel):
    hours: int
    minutes: int


class HijriVM(BaseModel):
    year: int
    month: int
    day: int
    month_name: str
    formatted: str


class HolidayVM(BaseModel):
    name: str
    description: str
    hijri_month: int
    hijri_day: int
    hijri_year: int
    date: str
    days_until: int


class RamadanVM(BaseModel):
    is_ramadan: bool
    days_until: int


class PrayerDayViewModel(BaseModel):
    header: HeaderVM
    times: PrayerTimesVM
    current_prayer: Optional[PrayerEntryVM] = None
    next_prayer: PrayerEntryVM
    time_remaining: RemainingVM
    hijri: HijriVM
    ramadan: RamadanVM
    holidays: List[HolidayVM] = Field(default_factory=list)


class MethodVM(BaseModel):
    key: str
    name: str
    fajr_angle: float
    isha_angle: Optional[float] = None
    isha_interval_minutes: Optional[int] = None
    maghrib_angle: Optional[float] = None
    dhuhr_offset_minutes: int = 0
    adjustments: Dict[str, int] = Field(default_factory=dict)


class ReminderVM(BaseModel):
    when: str
    title: str
    body: str
    data: Dict[str, str] = Field(default_factory=dict)


class RemindersResponse(BaseModel):
    date_local: str
    tz: str
    reminders: List[ReminderVM] = Field(default_factory=list)


class HijriConversionVM(BaseModel):
    gregorian: str
    hijri: HijriVM
    is_ramadan: bool


class HolidaysResponse(BaseModel):
    date: str
    holidays: List[HolidayVM] = Field(default_factory=list)
