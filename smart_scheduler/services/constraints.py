"""Global validation of a generated schedule against the hard constraints."""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from itertools import combinations
from typing import Dict, List, Tuple

from smart_scheduler.config import SchedulerConfig, SchedulingPreferences
from smart_scheduler.domain.context import SchedulingContext
from smart_scheduler.domain.models import Schedule, ScheduledShift

from .availability import AvailabilityResolver
from .eligibility import TimeOffCalendar, is_within_legacy_window
from .restrictions import RestrictionIndex
from .timeplan import calculate_shift_hours, day_name, intervals_overlap, window_contains


def validate_schedule(
    schedule: Schedule,
    context: SchedulingContext,
    preferences: SchedulingPreferences,
    cfg: SchedulerConfig | None = None,
) -> None:
    """
    Validate a schedule against all hard constraints.

    Args:
        schedule: Generated (or edited) schedule
        context: Data the schedule was generated from
        preferences: Effective scheduling preferences
        cfg: SchedulerConfig (legacy availability flag)

    Raises:
        ValueError: If any constraint is violated
    """
    cfg = cfg or SchedulerConfig()
    branch = context.branch
    resolver = AvailabilityResolver(context.availability_submissions)
    time_off = TimeOffCalendar(context.time_off_requests)
    restrictions = RestrictionIndex(context.restrictions)
    templates = context.templates_by_id()
    workers = context.workers_by_id()

    hours: Dict[str, float] = defaultdict(float)
    by_worker_day: Dict[Tuple[str, date], List[ScheduledShift]] = defaultdict(list)

    for shift in schedule.shifts:
        day = day_name(shift.date)
        assigned = list(shift.assigned_workers or [])

        # 1. Closed days and opening hours
        if branch is not None:
            if not branch.is_open_on(day):
                raise ValueError(f"Shift {shift.id} generated on closed day {day} ({shift.date})")
            opening = branch.hours_for(day)
            if assigned and not window_contains(opening["start"], opening["end"], shift.start_time, shift.end_time):
                raise ValueError(
                    f"Shift {shift.id} on {shift.date} is outside opening hours but has workers assigned"
                )

        # 2. Restricted pairs
        for first, second in combinations(assigned, 2):
            if restrictions.conflicts(first, second, schedule.branch_id):
                raise ValueError(f"Workers {first} and {second} are restricted but share shift {shift.id}")

        duration = calculate_shift_hours(shift.start_time, shift.end_time)
        if assigned and duration <= 0:
            raise ValueError(f"Shift {shift.id} on {shift.date} ends before it starts but has workers assigned")
        for worker_id in assigned:
            hours[worker_id] += duration
            by_worker_day[(worker_id, shift.date)].append(shift)

            # 3. Time off
            if time_off.has_approved_time_off(worker_id, shift.date):
                raise ValueError(f"Worker {worker_id} has approved time off on {shift.date} but is scheduled")

            # 4. Availability
            submission = resolver.resolve(worker_id, schedule.week_start_date)
            if submission is None:
                worker = workers.get(worker_id)
                template = templates.get(shift.template_id)
                legacy_ok = (
                    cfg.legacy_availability_fallback
                    and worker is not None
                    and template is not None
                    and is_within_legacy_window(worker, day, template)
                )
                if not legacy_ok:
                    raise ValueError(f"Worker {worker_id} has no availability for week {schedule.week_start_date}")
                continue
            if submission.status != "approved":
                raise ValueError(f"Worker {worker_id} availability for {schedule.week_start_date} is not approved")
            day_availability = (submission.availability or {}).get(day) or {}
            if not day_availability.get("available") or shift.template_id not in (day_availability.get("shifts") or []):
                raise ValueError(f"Worker {worker_id} did not accept shift template {shift.template_id} on {day}")

    # 5. Weekly hour cap
    cap = preferences.hour_cap
    for worker_id, total in hours.items():
        if total > cap + 1e-6:
            raise ValueError(f"Worker {worker_id} exceeds weekly hour cap: {total:.1f}h > {cap}h")

    # 6. Same-day overlaps
    for (worker_id, shift_date), shifts in by_worker_day.items():
        for a, b in combinations(shifts, 2):
            if intervals_overlap(a.start_time, a.end_time, b.start_time, b.end_time):
                raise ValueError(
                    f"Worker {worker_id} has overlapping shifts on {shift_date}: "
                    f"{a.start_time}-{a.end_time} overlaps {b.start_time}-{b.end_time}"
                )
