"""
Conversion of shift clock times between a caller's timezone and the
server timezone. Stored timings are always server-zone.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import HTTPException

from carestaff.core.config import settings
from carestaff.services.validators import calculate_duration_minutes, parse_clock_time


def get_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise HTTPException(status_code=400, detail=f"Unknown timezone: {name}")


def convert_clock_time(value: str, from_tz: str, to_tz: str, on: Optional[date] = None) -> str:
    """Convert "HH:MM" between zones using the offsets in force on ``on`` (default today)."""
    if from_tz == to_tz:
        return value
    on = on or date.today()
    local = datetime.combine(on, parse_clock_time(value), tzinfo=get_zone(from_tz))
    return local.astimezone(get_zone(to_tz)).strftime("%H:%M")


def timing_to_server(timing: Optional[dict], user_tz: str, on: Optional[date] = None) -> Optional[dict]:
    if not timing:
        return timing
    server_tz = settings.server_timezone
    start = convert_clock_time(timing["start_time"], user_tz, server_tz, on)
    end = convert_clock_time(timing["end_time"], user_tz, server_tz, on)
    converted = dict(timing, start_time=start, end_time=end, original_timezone=user_tz)
    if timing.get("duration_minutes") is not None:
        converted["duration_minutes"] = calculate_duration_minutes(start, end, bool(timing.get("is_overnight")))
    return converted


def timing_from_server(timing: Optional[dict], user_tz: str, on: Optional[date] = None) -> Optional[dict]:
    if not timing:
        return timing
    server_tz = settings.server_timezone
    return dict(
        timing,
        start_time=convert_clock_time(timing["start_time"], server_tz, user_tz, on),
        end_time=convert_clock_time(timing["end_time"], server_tz, user_tz, on),
    )
