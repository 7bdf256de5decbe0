from .prayer_viewmodel import (
    PlaceVM,
    HeaderVM,
    PrayerTimesVM,
    PrayerEntryVM,
    RemainingVM,
    HijriVM,
    HolidayVM,
    RamadanVM,
    PrayerDayViewModel,
    MethodVM,
    ReminderVM,
    RemindersResponse,
    HijriConversionVM,
    HolidaysResponse,
)
