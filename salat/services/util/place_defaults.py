"""Helpers for normalising place inputs for the prayer endpoints."""

import os
from typing import Any, Dict, Optional, Tuple

try:  # pragma: no cover - optional dependency
    from timezonefinder import TimezoneFinder

    _TF = TimezoneFinder()
except Exception:  # pragma: no cover
    _TF = None


DEF_LAT = float(os.getenv("DEFAULT_PLACE_LAT", "21.3891"))
DEF_LON = float(os.getenv("DEFAULT_PLACE_LON", "39.8579"))
DEF_TZ = os.getenv("DEFAULT_PLACE_TZ", "Asia/Riyadh")
DEF_LBL = os.getenv("DEFAULT_PLACE_LABEL", "Makkah, Saudi Arabia")


def infer_tz(lat: float, lon: float) -> Optional[str]:
    """Infer timezone name for a coordinate pair."""

    if _TF is None:
        return None
    try:
        return _TF.timezone_at(lng=lon, lat=lat)
    except Exception:  # pragma: no cover
        return None


def normalize_place(place: Optional[Dict[str, Any]]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Fill in default coordinates/timezone and report what was defaulted.

    Coordinates are passed through untouched; range checks happen when the
    ``GeoCoordinate`` is built.
    """

    flags: Dict[str, Any] = {
        "place_defaults_used": False,
        "tz_inferred": False,
        "default_reason": None,
    }

    if not place:
        flags.update({"place_defaults_used": True, "default_reason": "missing_place"})
        return {"lat": DEF_LAT, "lon": DEF_LON, "tz": DEF_TZ, "label": DEF_LBL}, flags

    lat = place.get("lat")
    lon = place.get("lon")
    tz = place.get("tz")
    lbl = place.get("label") or place.get("query") or None

    if lat is None or lon is None:
        flags.update({"place_defaults_used": True, "default_reason": "missing_latlon"})
        return {"lat": DEF_LAT, "lon": DEF_LON, "tz": tz or DEF_TZ, "label": lbl or DEF_LBL}, flags

    lat, lon = float(lat), float(lon)

    if not tz:
        tz_guess = infer_tz(lat, lon)
        if tz_guess:
            tz = tz_guess
            flags["tz_inferred"] = True
        else:
            tz = DEF_TZ
        flags["default_reason"] = "missing_tz"

    eff_lbl = lbl or f"{lat:.4f}, {lon:.4f}"
    return {"lat": lat, "lon": lon, "tz": tz, "label": eff_lbl}, flags
