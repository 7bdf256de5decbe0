"""Prayer time API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Body, HTTPException, Query
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..schemas.prayer_viewmodel import MethodVM, PrayerDayViewModel, RemindersResponse
from ..services.errors import HijriConversionError, InvalidCoordinate, NoSolarSolution
from ..services.methods import list_methods
from ..services.orchestrators.daily_full import build_reminders_response, build_viewmodel
from ..services.reminders import DEFAULT_REMINDER_MINUTES, NotificationSettings


router = APIRouter(prefix="/v1/prayer", tags=["prayer"])


class PrayerPlace(BaseModel):
    lat: Optional[float] = Field(default=None, ge=-90.0, le=90.0)
    lon: Optional[float] = Field(default=None, ge=-180.0, le=180.0)
    tz: Optional[str] = None
    label: Optional[str] = None


class PrayerOptions(BaseModel):
    method: Optional[str] = None
    asr_method: Optional[str] = None
    high_latitude_rule: Optional[str] = None
    holiday_limit: int = Field(default=3, ge=0, le=18)


class PrayerRequest(BaseModel):
    date: Optional[str] = None
    place: Optional[PrayerPlace] = None
    options: PrayerOptions = Field(default_factory=PrayerOptions)


def _check_place(place: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not place:
        return None
    tz_name = place.get("tz")
    if tz_name:
        try:
            ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise HTTPException(status_code=422, detail=f"Invalid timezone: {tz_name}") from exc
    return place


def _place_from_query(lat, lon, tz, label) -> Optional[Dict[str, Any]]:
    place: Dict[str, Any] = {}
    if lat is not None:
        place["lat"] = lat
    if lon is not None:
        place["lon"] = lon
    if tz is not None:
        place["tz"] = tz
    if label:
        place["label"] = label
    return _check_place(place or None)


def _run(fn, *args, **kwargs):
    try:
        return fn(*args, **kwargs)
    except InvalidCoordinate as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except NoSolarSolution as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except HijriConversionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ValueError as exc:
        # bad date strings and option values
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post(
    "/compute",
    response_model=PrayerDayViewModel,
    summary="Compute prayer times for a specific date and location",
)
def prayer_compute(
    req: PrayerRequest = Body(
        ...,
        examples=[
            {
                "date": "2024-03-15",
                "place": {"lat": 21.3891, "lon": 39.8579, "tz": "Asia/Riyadh", "label": "Makkah"},
                "options": {"method": "MuslimWorldLeague", "asr_method": "Standard"},
            }
        ],
    ),
):
    place = _check_place(req.place.model_dump(exclude_none=True) if req.place else None)
    return _run(build_viewmodel, req.date, place, req.options.model_dump())


@router.get(
    "/today",
    response_model=PrayerDayViewModel,
    summary="Convenience endpoint for today's prayer times",
)
def prayer_today(
    lat: Optional[float] = Query(None, ge=-90.0, le=90.0, description="Latitude"),
    lon: Optional[float] = Query(None, ge=-180.0, le=180.0, description="Longitude"),
    tz: Optional[str] = Query(None, description="IANA timezone"),
    date: Optional[str] = Query(None, description="Date (YYYY-MM-DD); defaults to today at the place"),
    method: Optional[str] = Query(None, description="Calculation method key"),
    asr_method: Optional[str] = Query(None, description="Standard or Hanafi"),
    high_latitude_rule: Optional[str] = Query(None),
    place_label: Optional[str] = Query(None, description="Optional place label"),
):
    options = {
        "method": method,
        "asr_method": asr_method,
        "high_latitude_rule": high_latitude_rule,
    }
    place = _place_from_query(lat, lon, tz, place_label)
    return _run(build_viewmodel, date, place, options)


@router.get("/methods", response_model=List[MethodVM], summary="List calculation methods")
def prayer_methods():
    return list_methods()


@router.get(
    "/reminders",
    response_model=RemindersResponse,
    summary="Reminders (prayer time plus lead-time alert) still ahead today",
)
def prayer_reminders(
    lat: Optional[float] = Query(None, ge=-90.0, le=90.0),
    lon: Optional[float] = Query(None, ge=-180.0, le=180.0),
    tz: Optional[str] = Query(None),
    date: Optional[str] = Query(None),
    method: Optional[str] = Query(None),
    reminder_minutes: int = Query(DEFAULT_REMINDER_MINUTES, ge=0, le=120),
    place_label: Optional[str] = Query(None),
):
    place = _place_from_query(lat, lon, tz, place_label)
    settings = NotificationSettings(reminder_minutes=reminder_minutes)
    return _run(build_reminders_response, date, place, {"method": method}, settings)
