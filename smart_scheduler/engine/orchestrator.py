"""Orchestrator - walks a week of days and shift templates to build a schedule."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from smart_scheduler.config import SchedulerConfig, SchedulingPreferences
from smart_scheduler.domain.context import SchedulingContext, load_scheduling_context
from smart_scheduler.domain.models import Schedule, ScheduledShift, ShiftTemplate, Worker
from smart_scheduler.domain.repositories import ScheduleRepository
from smart_scheduler.services.availability import AvailabilityResolver
from smart_scheduler.services.constraints import validate_schedule
from smart_scheduler.services.eligibility import TimeOffCalendar, is_worker_eligible
from smart_scheduler.services.restrictions import RestrictionIndex
from smart_scheduler.services.timeplan import (
    calculate_shift_hours,
    day_name,
    normalize_week_start,
    to_date,
    week_dates,
    window_contains,
)
from smart_scheduler.services.tracker import ConflictTracker

from .selector import select_workers


class SchedulePreconditionError(ValueError):
    """Generation was requested without a branch or without shift templates."""


class Orchestrator:
    """
    Greedy weekly schedule builder.

    For every open day of the week the applicable templates are processed in
    start-time order. Each template gets an eligible pool (availability, time
    off, same-day overlap, weekly hour cap) and the selector picks workers from
    it. Under-staffed shifts are returned as-is, never raised.
    """

    def __init__(self, cfg: SchedulerConfig | None = None):
        self.cfg = cfg or SchedulerConfig()

    def resolve_preferences(
        self, context: SchedulingContext, overrides: Optional[Dict] = None
    ) -> SchedulingPreferences:
        """Config defaults, then the branch's stored preferences, then the caller's overrides."""
        return self.cfg.preferences.merged(context.stored_preferences).merged(overrides)

    def applicable_templates(
        self,
        templates: Iterable[ShiftTemplate],
        day: str,
    ) -> List[ShiftTemplate]:
        """Templates that run on ``day``, earliest start first."""
        applicable = []
        for template in templates:
            template_days = [d.lower() for d in (template.days or [])] or self.cfg.default_template_days
            if day in template_days:
                applicable.append(template)
        # "HH:MM" strings sort chronologically
        return sorted(applicable, key=lambda t: t.start_time)

    def build_schedule(
        self,
        context: SchedulingContext,
        week_start_date,
        selected_template_ids: List[str],
        preferences: Optional[Dict] = None,
    ) -> Schedule:
        """
        Generate an unsaved schedule for one week.

        Args:
            context: Branch data to schedule from
            week_start_date: Any date in the target week; normalized to its Monday
            selected_template_ids: Shift templates to schedule
            preferences: Partial preference overrides for this run

        Returns:
            Schedule (not persisted)

        Raises:
            SchedulePreconditionError: No branch or no templates selected
        """
        if context.branch is None:
            raise SchedulePreconditionError("No branch selected")
        if not selected_template_ids:
            raise SchedulePreconditionError("No shift templates selected")

        branch = context.branch
        prefs = self.resolve_preferences(context, preferences)
        week_start = normalize_week_start(week_start_date)
        if week_start != to_date(week_start_date):
            print(f"[WARN] Week start {to_date(week_start_date)} is not a Monday, using {week_start}")

        templates_by_id = context.templates_by_id()
        selected = [templates_by_id[tid] for tid in selected_template_ids if tid in templates_by_id]
        missing = [tid for tid in selected_template_ids if tid not in templates_by_id]
        if missing:
            print(f"[WARN] Unknown shift templates ignored: {missing}")

        print(f"[INFO] Orchestrator: Building schedule for branch {branch.id}, week {week_start}")
        print(f"[INFO] Workers: {len(context.workers)}, templates selected: {len(selected)}")

        resolver = AvailabilityResolver(context.availability_submissions)
        time_off = TimeOffCalendar(context.time_off_requests)
        restrictions = RestrictionIndex(context.restrictions)
        if restrictions:
            print(f"[INFO] Restricted pairs: {len(restrictions)}")
        tracker = ConflictTracker()
        hour_cap = prefs.hour_cap

        schedule = Schedule(
            id=str(uuid.uuid4()),
            branch_id=branch.id,
            week_start_date=week_start,
            created_at=datetime.now(timezone.utc),
            archived=False,
        )

        for shift_date in week_dates(week_start):
            day = day_name(shift_date)
            if not branch.is_open_on(day):
                print(f"[INFO] {day} ({shift_date}): branch closed")
                continue

            opening = branch.hours_for(day)
            day_templates = self.applicable_templates(selected, day)
            print(f"[INFO] {day} ({shift_date}): {len(day_templates)} shift template(s)")

            for template in day_templates:
                if not window_contains(opening["start"], opening["end"], template.start_time, template.end_time):
                    print(f"[WARN] {template.name} {template.start_time}-{template.end_time} outside opening hours")
                    schedule.shifts.append(self._empty_shift(template, shift_date))
                    continue

                hours = calculate_shift_hours(template.start_time, template.end_time)
                eligible = [
                    worker
                    for worker in context.workers
                    if self._can_take(worker, day, template, week_start, shift_date, hours, hour_cap,
                                      prefs, resolver, time_off, tracker)
                ]

                shift = select_workers(
                    eligible,
                    template,
                    day,
                    shift_date,
                    tracker.hours_by_worker,
                    prefs,
                    restrictions,
                    branch.id,
                    self.cfg.weights,
                    context.rating_criteria,
                )
                schedule.shifts.append(shift)

                for worker_id in shift.assigned_workers:
                    tracker.record(worker_id, shift_date, shift, hours)
                print(
                    f"[INFO] {template.name} on {shift_date}: "
                    f"{len(shift.assigned_workers)}/{template.required_workers} assigned "
                    f"from {len(eligible)} eligible"
                )

        validate_schedule(schedule, context, prefs, self.cfg)

        print(f"[OK] Orchestrator: Generated {len(schedule.shifts)} shifts for week {week_start}")
        for worker_id, total in sorted(tracker.hours_by_worker.items()):
            print(f"[INFO]   {worker_id}: {total:g}h")
        return schedule

    def _can_take(
        self,
        worker: Worker,
        day: str,
        template: ShiftTemplate,
        week_start,
        shift_date,
        hours: float,
        hour_cap: float,
        prefs: SchedulingPreferences,
        resolver: AvailabilityResolver,
        time_off: TimeOffCalendar,
        tracker: ConflictTracker,
    ) -> bool:
        if not is_worker_eligible(
            worker, day, template, week_start, shift_date, resolver, time_off,
            legacy_fallback=self.cfg.legacy_availability_fallback,
        ):
            return False
        if tracker.has_conflict(worker.id, shift_date, template):
            return False
        if tracker.would_exceed_hour_cap(worker.id, hours, hour_cap):
            return False
        if self.cfg.enforce_rest_rules:
            if tracker.would_exceed_consecutive_days(worker.id, shift_date, prefs.max_consecutive_days):
                return False
            if tracker.violates_min_rest(worker.id, shift_date, template, prefs.min_rest_hours):
                return False
        return True

    @staticmethod
    def _empty_shift(template: ShiftTemplate, shift_date) -> ScheduledShift:
        return ScheduledShift(
            id=str(uuid.uuid4()),
            template_id=template.id,
            date=to_date(shift_date),
            start_time=template.start_time,
            end_time=template.end_time,
            assigned_workers=[],
        )


def generate_schedule(
    context: SchedulingContext,
    week_start_date,
    selected_template_ids: List[str],
    preferences: Optional[Dict] = None,
    cfg: SchedulerConfig | None = None,
) -> Schedule:
    """Convenience wrapper around ``Orchestrator.build_schedule``."""
    return Orchestrator(cfg).build_schedule(context, week_start_date, selected_template_ids, preferences)


def build_week_schedule(
    session: Session,
    branch_id: str,
    week_start_date,
    selected_template_ids: List[str] | None = None,
    cfg: SchedulerConfig | None = None,
    preferences: Optional[Dict] = None,
    persist: bool = True,
    replace_existing: bool = False,
) -> Schedule:
    """
    Load a branch from the database, generate its week and optionally save it.

    Args:
        session: Database session
        branch_id: Branch to schedule
        week_start_date: Any date in the target week
        selected_template_ids: Templates to schedule (default: all of the branch's)
        cfg: SchedulerConfig
        preferences: Partial preference overrides
        persist: Save the schedule
        replace_existing: Replace the week's active schedule instead of failing

    Returns:
        The generated schedule

    Raises:
        SchedulePreconditionError: Unknown branch or nothing to schedule
        ScheduleConflictError: The week already has an active schedule
    """
    context = load_scheduling_context(session, branch_id)
    if selected_template_ids is None:
        selected_template_ids = [t.id for t in context.shift_templates]

    schedule = generate_schedule(context, week_start_date, selected_template_ids, preferences, cfg)

    if persist:
        ScheduleRepository.save(session, schedule, replace_existing=replace_existing)
        print(f"[INFO] Persisted schedule {schedule.id} with {len(schedule.shifts)} shifts")

    return schedule
