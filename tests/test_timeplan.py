"""Tests for time and calendar helpers."""

import datetime as dt

import pytest

from smart_scheduler.services.timeplan import (
    DAYS_OF_WEEK,
    calculate_shift_hours,
    day_name,
    intervals_overlap,
    normalize_week_start,
    parse_time_string,
    to_date,
    week_dates,
    window_contains,
)


def test_shift_hours():
    """Durations are computed in fractional hours."""
    assert calculate_shift_hours("09:00", "17:00") == 8.0
    assert calculate_shift_hours("09:30", "13:00") == 3.5


def test_parse_time_rejects_garbage():
    """Malformed times raise ValueError."""
    with pytest.raises(ValueError):
        parse_time_string("nine")


def test_intervals_are_half_open():
    """Back-to-back shifts do not overlap."""
    assert not intervals_overlap("09:00", "13:00", "13:00", "17:00")
    assert intervals_overlap("08:00", "16:00", "15:00", "18:00")
    assert intervals_overlap("10:00", "11:00", "09:00", "17:00")


def test_window_contains():
    """A shift must sit inside the opening window."""
    assert window_contains("09:00", "17:00", "09:00", "17:00")
    assert not window_contains("09:00", "17:00", "08:00", "12:00")
    assert not window_contains("09:00", "17:00", "15:00", "18:00")


def test_day_name_uses_calendar_date():
    """2025-06-02 is a Monday and 2025-06-08 a Sunday."""
    assert day_name(dt.date(2025, 6, 2)) == "monday"
    assert day_name("2025-06-08") == "sunday"
    assert DAYS_OF_WEEK[0] == "sunday"


def test_normalize_week_start():
    """Any date maps to the Monday of its week."""
    assert normalize_week_start(dt.date(2025, 6, 5)) == dt.date(2025, 6, 2)
    assert normalize_week_start(dt.date(2025, 6, 8)) == dt.date(2025, 6, 2)
    assert normalize_week_start("2025-06-02") == dt.date(2025, 6, 2)


def test_week_dates():
    """A week is seven consecutive dates from the start."""
    dates = week_dates(dt.date(2025, 6, 2))
    assert len(dates) == 7
    assert dates[0] == dt.date(2025, 6, 2)
    assert dates[-1] == dt.date(2025, 6, 8)


def test_to_date_drops_time():
    """Datetimes are truncated to their date."""
    assert to_date(dt.datetime(2025, 6, 2, 23, 59)) == dt.date(2025, 6, 2)


def test_window_contains_rejects_inverted_window():
    """An end before the start never fits an opening window."""
    assert not window_contains("09:00", "17:00", "22:00", "02:00")
    assert not window_contains("00:00", "23:59", "12:00", "12:00")
