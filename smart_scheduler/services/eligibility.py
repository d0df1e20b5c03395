"""Eligibility checks for placing a worker on a shift."""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Tuple

from smart_scheduler.domain.models import ShiftTemplate, TimeOffRequest, Worker

from .availability import AvailabilityResolver
from .timeplan import to_date, window_contains


class TimeOffCalendar:
    """Approved time off per worker."""

    def __init__(self, requests: Iterable[TimeOffRequest]):
        self._ranges: Dict[str, List[Tuple[date, date]]] = defaultdict(list)
        for request in requests:
            if request.status != "approved":
                continue
            self._ranges[request.worker_id].append(
                (to_date(request.start_date), to_date(request.end_date))
            )

    def has_approved_time_off(self, worker_id: str, on_date) -> bool:
        day = to_date(on_date)
        return any(start <= day <= end for start, end in self._ranges.get(worker_id, ()))


def is_within_legacy_window(worker: Worker, day_of_week: str, template: ShiftTemplate) -> bool:
    """Check the worker's simple per-day start/end window covers the template."""
    window = (worker.availability or {}).get(day_of_week.lower())
    if not window or not window.get("available"):
        return False
    try:
        return window_contains(window["start"], window["end"], template.start_time, template.end_time)
    except KeyError:
        return False


def is_worker_eligible(
    worker: Worker,
    day_of_week: str,
    template: ShiftTemplate,
    week_start_date,
    shift_date,
    resolver: AvailabilityResolver,
    time_off: TimeOffCalendar,
    legacy_fallback: bool = False,
) -> bool:
    """
    Decide whether a worker may be considered for a shift.

    Checks, in order:
    1. No approved time off on ``shift_date``.
    2. An approved availability submission exists for the week. Without any
       submission the legacy day window is used instead, if ``legacy_fallback``.
    3. That day is marked available and lists ``template.id``.

    Args:
        worker: Candidate worker
        day_of_week: Lowercase weekday name of ``shift_date``
        template: Shift template being filled
        week_start_date: Monday of the target week
        shift_date: Calendar date of the shift
        resolver: Availability submissions lookup
        time_off: Approved time off lookup
        legacy_fallback: Allow the superseded per-day window format

    Returns:
        True if every check passes
    """
    if time_off.has_approved_time_off(worker.id, shift_date):
        return False

    submission = resolver.resolve(worker.id, week_start_date)
    if submission is None:
        if legacy_fallback:
            return is_within_legacy_window(worker, day_of_week, template)
        return False

    if submission.status != "approved" or not submission.availability:
        return False

    day_availability = submission.availability.get(day_of_week.lower())
    if not day_availability or not day_availability.get("available"):
        return False

    shifts = day_availability.get("shifts")
    if not isinstance(shifts, list):
        return False
    return template.id in shifts
