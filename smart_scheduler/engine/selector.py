"""Pick the workers for a single shift instance from its eligible pool."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Dict, Iterable, List, Optional

from smart_scheduler.config import SchedulingPreferences, ScoringWeights
from smart_scheduler.domain.models import ScheduledShift, ShiftTemplate, Worker
from smart_scheduler.services.restrictions import RestrictionIndex
from smart_scheduler.services.scoring import DEFAULT_WEIGHTS, calculate_worker_score
from smart_scheduler.services.timeplan import to_date

# Hour gap below which workload balancing defers to score
BALANCE_TOLERANCE_HOURS = 3.0


@dataclass
class Candidate:
    worker: Worker
    score: float
    current_hours: float


def rank_candidates(
    workers: Iterable[Worker],
    template: ShiftTemplate,
    current_hours: Dict[str, float],
    preferences: SchedulingPreferences,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    rating_criteria: Optional[Iterable[str]] = None,
) -> List[Candidate]:
    """
    Order workers best-first for a template.

    With workload balancing, fewer hours wins when the gap exceeds
    BALANCE_TOLERANCE_HOURS; otherwise the higher score wins. Ties keep the
    input order.
    """
    criteria = list(rating_criteria) if rating_criteria is not None else None
    candidates = [
        Candidate(
            worker=w,
            score=calculate_worker_score(w, template, preferences, weights, criteria),
            current_hours=current_hours.get(w.id, 0.0),
        )
        for w in workers
    ]

    def compare(a: Candidate, b: Candidate) -> float:
        if preferences.balance_workload:
            hours_diff = a.current_hours - b.current_hours
            if abs(hours_diff) > BALANCE_TOLERANCE_HOURS:
                return hours_diff
        return b.score - a.score

    return sorted(candidates, key=cmp_to_key(compare))


def select_workers(
    eligible_workers: List[Worker],
    template: ShiftTemplate,
    day_of_week: str,
    shift_date,
    current_hours: Dict[str, float],
    preferences: SchedulingPreferences,
    restrictions: RestrictionIndex,
    branch_id: str,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    rating_criteria: Optional[Iterable[str]] = None,
) -> ScheduledShift:
    """
    Build a scheduled shift by greedy selection from the eligible pool.

    Phase A fills each job-title quota from workers holding exactly that title.
    Phase B fills the remaining ``required_workers`` slots from everyone not yet
    picked. Every pick must be compatible with all workers picked so far.

    Args:
        eligible_workers: Workers that passed eligibility, overlap and hour checks
        template: Shift template being filled
        day_of_week: Lowercase weekday name (for logging)
        shift_date: Calendar date of the shift
        current_hours: Hours already assigned this week per worker
        preferences: Effective scheduling preferences
        restrictions: Pairing restrictions
        branch_id: Branch the restrictions are scoped to
        weights: Scoring weights
        rating_criteria: Branch rating criteria

    Returns:
        ScheduledShift, possibly with fewer workers than required
    """
    selected: List[str] = []

    def try_add(candidate: Candidate) -> bool:
        blocker = restrictions.conflicts_with_any(candidate.worker.id, selected, branch_id)
        if blocker is not None:
            print(f"[INFO] Restriction: {candidate.worker.id} cannot work with {blocker}")
            return False
        selected.append(candidate.worker.id)
        return True

    # Phase A: job title quotas
    for job_title, required_count in (template.job_title_requirements or {}).items():
        titled = [w for w in eligible_workers if w.job_title and w.job_title == job_title]
        ranked = rank_candidates(titled, template, current_hours, preferences, weights, rating_criteria)
        filled = 0
        for candidate in ranked:
            if filled >= int(required_count):
                break
            if try_add(candidate):
                filled += 1
        print(f"[INFO] {template.name} {day_of_week}: {filled}/{required_count} {job_title} slot(s) filled")

    # Phase B: generic fill
    remaining_slots = int(template.required_workers or 1) - len(selected)
    if remaining_slots > 0:
        remaining = [w for w in eligible_workers if w.id not in selected]
        ranked = rank_candidates(remaining, template, current_hours, preferences, weights, rating_criteria)
        added = 0
        for candidate in ranked:
            if added >= remaining_slots:
                break
            if try_add(candidate):
                added += 1

    return ScheduledShift(
        id=str(uuid.uuid4()),
        template_id=template.id,
        date=to_date(shift_date),
        start_time=template.start_time,
        end_time=template.end_time,
        assigned_workers=selected,
    )
