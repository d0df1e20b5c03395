"""Tests for ConflictTracker bookkeeping."""

import datetime as dt

from smart_scheduler.domain.models import ScheduledShift
from smart_scheduler.services.tracker import ConflictTracker

MONDAY = dt.date(2025, 6, 2)


def _shift(shift_id, on, start, end):
    return ScheduledShift(id=shift_id, template_id="t", date=on, start_time=start, end_time=end, assigned_workers=[])


def test_overlap_detected_same_day(make_template):
    """A booked 08:00-16:00 shift conflicts with 15:00-18:00 that day only."""
    tracker = ConflictTracker()
    tracker.record("w1", MONDAY, _shift("s1", MONDAY, "08:00", "16:00"), 8)

    late = make_template("late", start="15:00", end="18:00")
    assert tracker.has_conflict("w1", MONDAY, late)
    assert not tracker.has_conflict("w1", MONDAY + dt.timedelta(days=1), late)
    assert not tracker.has_conflict("w2", MONDAY, late)


def test_adjacent_shifts_do_not_conflict(make_template):
    """End time equal to start time is not an overlap."""
    tracker = ConflictTracker()
    tracker.record("w1", MONDAY, _shift("s1", MONDAY, "09:00", "13:00"), 4)
    assert not tracker.has_conflict("w1", MONDAY, make_template("pm", start="13:00", end="17:00"))


def test_hour_cap():
    """Adding hours past the cap is refused; reaching it exactly is fine."""
    tracker = ConflictTracker()
    tracker.record("w1", MONDAY, _shift("s1", MONDAY, "09:00", "17:00"), 8)
    assert tracker.current_hours("w1") == 8
    assert not tracker.would_exceed_hour_cap("w1", 2, 10)
    assert tracker.would_exceed_hour_cap("w1", 2.5, 10)
    assert tracker.current_hours("unknown") == 0


def test_consecutive_days():
    """A sixth day in a row exceeds a five day limit."""
    tracker = ConflictTracker()
    for offset in range(5):
        day = MONDAY + dt.timedelta(days=offset)
        tracker.record("w1", day, _shift(f"s{offset}", day, "09:00", "13:00"), 4)

    assert tracker.would_exceed_consecutive_days("w1", MONDAY + dt.timedelta(days=5), 5)
    assert not tracker.would_exceed_consecutive_days("w1", MONDAY + dt.timedelta(days=6), 5)
    # Already working that day: no new day is added
    assert not tracker.would_exceed_consecutive_days("w1", MONDAY, 5)


def test_min_rest_across_days(make_template):
    """A late finish followed by an early start violates the rest window."""
    tracker = ConflictTracker()
    tracker.record("w1", MONDAY, _shift("s1", MONDAY, "14:00", "23:00"), 9)

    early = make_template("early", start="06:00", end="10:00")
    assert tracker.violates_min_rest("w1", MONDAY + dt.timedelta(days=1), early, 8)
    assert not tracker.violates_min_rest("w1", MONDAY + dt.timedelta(days=1), early, 7)
