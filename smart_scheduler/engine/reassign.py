"""Manual edits to a generated schedule: moving workers and approved swaps.

These operations trust the caller's own availability checks and do not re-run
scoring or eligibility.
"""

from __future__ import annotations

from smart_scheduler.domain.models import Schedule


def move_worker_to_shift(schedule: Schedule, worker_id: str, from_shift_id: str, to_shift_id: str) -> bool:
    """
    Move a worker from one shift of the schedule to another.

    Returns:
        False if either shift is not part of the schedule, True otherwise
    """
    source = schedule.get_shift(from_shift_id)
    target = schedule.get_shift(to_shift_id)
    if source is None or target is None:
        return False

    source.assigned_workers = [w for w in source.assigned_workers if w != worker_id]
    if worker_id not in target.assigned_workers:
        target.assigned_workers.append(worker_id)
    return True


def apply_shift_switch(
    schedule: Schedule,
    requester_id: str,
    requester_shift_id: str,
    target_worker_id: str,
    target_shift_id: str,
) -> bool:
    """
    Swap two workers between their shifts after a switch request is approved.

    Returns:
        False if either shift is not part of the schedule, True otherwise
    """
    requester_shift = schedule.get_shift(requester_shift_id)
    target_shift = schedule.get_shift(target_shift_id)
    if requester_shift is None or target_shift is None:
        return False

    requester_shift.assigned_workers = [
        w for w in requester_shift.assigned_workers if w != requester_id
    ] + [target_worker_id]
    target_shift.assigned_workers = [
        w for w in target_shift.assigned_workers if w != target_worker_id
    ] + [requester_id]
    return True
