from datetime import date, datetime, timezone
from typing import Annotated

from pydantic import BaseModel, BeforeValidator


def to_calendar_date(value):
    """ISO date-time strings collapse to their UTC calendar date; plain dates pass through."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        return value
    elif isinstance(value, str) and "T" in value:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        return value
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.date()


CalendarDate = Annotated[date, BeforeValidator(to_calendar_date)]


def dump_set_fields(model: BaseModel, **kwargs) -> dict:
    """model_dump of the top-level fields the caller set. Nested models keep their defaults."""
    data = model.model_dump(**kwargs)
    return {field: value for field, value in data.items() if field in model.model_fields_set}

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"
