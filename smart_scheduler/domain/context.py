"""In-memory bundle of everything one schedule generation needs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from .models import (
    AvailabilitySubmission,
    Branch,
    ShiftTemplate,
    TimeOffRequest,
    Worker,
    WorkerRestriction,
)
from .repositories import (
    AvailabilityRepository,
    BranchRepository,
    RestrictionRepository,
    ShiftTemplateRepository,
    TimeOffRepository,
    WorkerRepository,
)


@dataclass
class SchedulingContext:
    """
    Branch configuration, worker directory and worker submissions for one branch.

    The scheduling engine only reads from this object; it performs no I/O.
    """

    branch: Optional[Branch]
    workers: List[Worker] = field(default_factory=list)
    shift_templates: List[ShiftTemplate] = field(default_factory=list)
    availability_submissions: List[AvailabilitySubmission] = field(default_factory=list)
    time_off_requests: List[TimeOffRequest] = field(default_factory=list)
    restrictions: List[WorkerRestriction] = field(default_factory=list)

    @property
    def branch_id(self) -> Optional[str]:
        return self.branch.id if self.branch is not None else None

    @property
    def rating_criteria(self) -> Optional[List[str]]:
        if self.branch is None or not self.branch.rating_criteria:
            return None
        return list(self.branch.rating_criteria)

    @property
    def stored_preferences(self) -> Dict:
        if self.branch is None:
            return {}
        return dict(self.branch.scheduling_preferences or {})

    def templates_by_id(self) -> Dict[str, ShiftTemplate]:
        return {t.id: t for t in self.shift_templates}

    def workers_by_id(self) -> Dict[str, Worker]:
        return {w.id: w for w in self.workers}


def load_scheduling_context(session: Session, branch_id: str) -> SchedulingContext:
    """
    Bulk-load a branch's scheduling data in one pass.

    Database errors propagate to the caller unchanged.
    """
    branch = BranchRepository.get_by_id(session, branch_id)
    if branch is None:
        return SchedulingContext(branch=None)

    workers = WorkerRepository.get_by_branch(session, branch_id)
    worker_ids = [w.id for w in workers]
    return SchedulingContext(
        branch=branch,
        workers=workers,
        shift_templates=ShiftTemplateRepository.get_by_branch(session, branch_id),
        availability_submissions=AvailabilityRepository.get_for_workers(session, worker_ids),
        time_off_requests=TimeOffRepository.get_for_workers(session, worker_ids),
        restrictions=RestrictionRepository.get_by_branch(session, branch_id),
    )
