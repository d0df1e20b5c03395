"""Per-generation bookkeeping of assigned hours and same-day shifts."""

from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, List

from smart_scheduler.domain.models import ScheduledShift, ShiftTemplate

from .timeplan import combine, intervals_overlap, to_date


def has_time_overlap(template: ShiftTemplate, existing_shift: ScheduledShift) -> bool:
    """True if the template's [start, end) window intersects the existing shift's."""
    return intervals_overlap(
        template.start_time, template.end_time, existing_shift.start_time, existing_shift.end_time
    )


class ConflictTracker:
    """
    Weekly hours and daily assignments of every worker during one generation run.

    Create a new tracker per run; state must never be shared between runs.
    """

    def __init__(self):
        self.hours_by_worker: Dict[str, float] = defaultdict(float)
        # worker -> date -> [shift ids]
        self.daily_assignments: Dict[str, Dict[date, List[str]]] = defaultdict(lambda: defaultdict(list))
        self._shifts: Dict[str, ScheduledShift] = {}

    def current_hours(self, worker_id: str) -> float:
        return self.hours_by_worker.get(worker_id, 0.0)

    def would_exceed_hour_cap(self, worker_id: str, additional_hours: float, cap: float) -> bool:
        return self.current_hours(worker_id) + additional_hours > cap

    def shifts_on(self, worker_id: str, shift_date) -> List[ScheduledShift]:
        day = to_date(shift_date)
        per_day = self.daily_assignments.get(worker_id, {})
        return [self._shifts[shift_id] for shift_id in per_day.get(day, ())]

    def has_conflict(self, worker_id: str, shift_date, template: ShiftTemplate) -> bool:
        """Template overlaps a shift already given to the worker that day."""
        return any(has_time_overlap(template, existing) for existing in self.shifts_on(worker_id, shift_date))

    def would_exceed_consecutive_days(self, worker_id: str, shift_date, max_days: int) -> bool:
        """Working ``shift_date`` would make a run longer than ``max_days`` days."""
        day = to_date(shift_date)
        worked = {d for d, ids in self.daily_assignments.get(worker_id, {}).items() if ids}
        if day in worked:
            return False

        run = 1
        cursor = day - timedelta(days=1)
        while cursor in worked:
            run += 1
            cursor -= timedelta(days=1)
        cursor = day + timedelta(days=1)
        while cursor in worked:
            run += 1
            cursor += timedelta(days=1)
        return run > max_days

    def violates_min_rest(self, worker_id: str, shift_date, template: ShiftTemplate, min_rest_hours: float) -> bool:
        """Fewer than ``min_rest_hours`` between the template and any other shift of the worker."""
        day = to_date(shift_date)
        new_start = combine(day, template.start_time)
        new_end = combine(day, template.end_time)
        min_gap = timedelta(hours=min_rest_hours)

        for worked_day in (day - timedelta(days=1), day, day + timedelta(days=1)):
            for existing in self.shifts_on(worker_id, worked_day):
                existing_start = combine(existing.date, existing.start_time)
                existing_end = combine(existing.date, existing.end_time)
                if existing_end <= new_start:
                    gap = new_start - existing_end
                elif new_end <= existing_start:
                    gap = existing_start - new_end
                else:
                    # Overlaps are handled by has_conflict
                    continue
                if gap < min_gap:
                    return True
        return False

    def record(self, worker_id: str, shift_date, shift: ScheduledShift, hours: float) -> None:
        """Book a worker onto a shift."""
        self._shifts[shift.id] = shift
        self.hours_by_worker[worker_id] += hours
        self.daily_assignments[worker_id][to_date(shift_date)].append(shift.id)
