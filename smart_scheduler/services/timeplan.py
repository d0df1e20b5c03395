"""Time and calendar helpers shared by the scheduling services."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

import pandas as pd


# Sunday-indexed, matching the order days are reported in opening hours
DAYS_OF_WEEK = ["sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]


def parse_time_string(value: str) -> time:
    """Parse an ``HH:MM`` string."""
    try:
        hours, minutes = [int(x) for x in str(value).strip().split(":")]
        return time(hours, minutes)
    except ValueError as e:
        raise ValueError(f"Invalid time '{value}', expected HH:MM") from e


def minutes_of_day(value: str) -> int:
    t = parse_time_string(value)
    return t.hour * 60 + t.minute


def calculate_shift_hours(start_time: str, end_time: str) -> float:
    """Duration in hours of a same-day ``start_time``-``end_time`` window."""
    return (minutes_of_day(end_time) - minutes_of_day(start_time)) / 60.0


def intervals_overlap(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    """Half-open interval test: [a_start, a_end) intersects [b_start, b_end)."""
    return minutes_of_day(start_a) < minutes_of_day(end_b) and minutes_of_day(end_a) > minutes_of_day(start_b)


def window_contains(outer_start: str, outer_end: str, inner_start: str, inner_end: str) -> bool:
    """Non-empty same-day window [inner_start, inner_end) lies inside [outer_start, outer_end)."""
    inner_s, inner_e = minutes_of_day(inner_start), minutes_of_day(inner_end)
    return (
        inner_s < inner_e
        and inner_s >= minutes_of_day(outer_start)
        and inner_e <= minutes_of_day(outer_end)
    )


def to_date(value) -> date:
    """Coerce a date, datetime or ISO string to a date (time of day dropped)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return pd.Timestamp(value).date()


def day_name(value) -> str:
    """Lowercase weekday name of the actual calendar date."""
    return pd.Timestamp(to_date(value)).day_name().lower()


def normalize_week_start(value) -> date:
    """Monday of the week containing ``value``."""
    d = to_date(value)
    return d - timedelta(days=d.weekday())


def week_dates(week_start) -> list[date]:
    start = to_date(week_start)
    return [start + timedelta(days=offset) for offset in range(7)]


def combine(shift_date, hm: str) -> datetime:
    return datetime.combine(to_date(shift_date), parse_time_string(hm))
