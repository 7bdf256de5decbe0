"""Hijri calendar endpoints."""

from __future__ import annotations

from datetime import date as date_cls, datetime, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from ..schemas.prayer_viewmodel import HijriConversionVM, HolidaysResponse, RamadanVM
from ..services.errors import HijriConversionError
from ..services.hijri import HijriDate, days_until_ramadan, is_ramadan, to_gregorian, to_hijri
from ..services.holidays import upcoming_holidays
from ..services.orchestrators.daily_full import hijri_vm, holiday_vms


router = APIRouter(prefix="/v1/hijri", tags=["hijri"])


def _parse_date(value: Optional[str]) -> date_cls:
    if not value:
        return datetime.now(timezone.utc).date()
    try:
        return date_cls.fromisoformat(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid date: {value}") from exc


@router.get("/convert", response_model=HijriConversionVM, summary="Gregorian to Hijri")
def hijri_convert(date: Optional[str] = Query(None, description="Gregorian date (YYYY-MM-DD)")):
    day = _parse_date(date)
    try:
        hijri = to_hijri(day)
    except HijriConversionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return HijriConversionVM(gregorian=day.isoformat(), hijri=hijri_vm(hijri), is_ramadan=hijri.month == 9)


@router.get("/to-gregorian", response_model=HijriConversionVM, summary="Hijri to Gregorian")
def hijri_to_gregorian(
    year: int = Query(..., ge=1),
    month: int = Query(..., ge=1, le=12),
    day: int = Query(..., ge=1, le=30),
):
    try:
        hijri = HijriDate(year, month, day)
        gregorian = to_gregorian(hijri)
    except HijriConversionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return HijriConversionVM(gregorian=gregorian.isoformat(), hijri=hijri_vm(hijri), is_ramadan=month == 9)


@router.get("/ramadan", response_model=RamadanVM, summary="Ramadan status and countdown")
def hijri_ramadan(date: Optional[str] = Query(None)):
    day = _parse_date(date)
    try:
        return RamadanVM(is_ramadan=is_ramadan(day), days_until=days_until_ramadan(day))
    except HijriConversionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/holidays", response_model=HolidaysResponse, summary="Upcoming Islamic holidays")
def hijri_holidays(
    date: Optional[str] = Query(None),
    limit: int = Query(3, ge=1, le=18),
):
    day = _parse_date(date)
    try:
        items = upcoming_holidays(day, limit)
    except HijriConversionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return HolidaysResponse(date=day.isoformat(), holidays=holiday_vms(items))
