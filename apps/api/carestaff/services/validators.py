from datetime import date, time

MINUTES_PER_DAY = 24 * 60


def parse_clock_time(value: str) -> time:
    """Parse "HH:MM" (24h)."""
    try:
        hours, minutes = value.split(":")
        return time(int(hours), int(minutes))
    except (AttributeError, TypeError, ValueError):
        raise ValueError(f"Invalid time '{value}', expected HH:MM")


def minutes_since_midnight(value: str) -> int:
    t = parse_clock_time(value)
    return t.hour * 60 + t.minute


def calculate_duration_minutes(start_time: str, end_time: str, is_overnight: bool) -> int:
    # non-overnight inverted ranges come out negative; callers decide what to do
    start = minutes_since_midnight(start_time)
    end = minutes_since_midnight(end_time)
    if is_overnight and end <= start:
        end += MINUTES_PER_DAY
    return end - start


def validate_date_range(start: date | None, end: date | None) -> None:
    if start and end and end < start:
        raise ValueError("effective_to must not be before effective_from")
