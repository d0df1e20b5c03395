"""Scheduling engine: shift selection, weekly orchestration and manual edits."""

from .orchestrator import Orchestrator, SchedulePreconditionError, build_week_schedule, generate_schedule
from .reassign import apply_shift_switch, move_worker_to_shift
from .selector import rank_candidates, select_workers

__all__ = [
    "Orchestrator",
    "SchedulePreconditionError",
    "build_week_schedule",
    "generate_schedule",
    "apply_shift_switch",
    "move_worker_to_shift",
    "rank_candidates",
    "select_workers",
]
