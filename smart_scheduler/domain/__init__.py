"""Domain models and data access layer."""

from .models import (
    AvailabilitySubmission,
    Base,
    Branch,
    Schedule,
    ScheduledShift,
    ShiftTemplate,
    TimeOffRequest,
    Worker,
    WorkerRestriction,
)
from .context import SchedulingContext, load_scheduling_context
from .repositories import (
    AvailabilityRepository,
    BranchRepository,
    RestrictionRepository,
    ScheduleConflictError,
    ScheduleRepository,
    ShiftTemplateRepository,
    TimeOffRepository,
    WorkerRepository,
)

__all__ = [
    "SchedulingContext",
    "load_scheduling_context",
    "AvailabilitySubmission",
    "Base",
    "Branch",
    "Schedule",
    "ScheduledShift",
    "ShiftTemplate",
    "TimeOffRequest",
    "Worker",
    "WorkerRestriction",
    "AvailabilityRepository",
    "BranchRepository",
    "RestrictionRepository",
    "ScheduleConflictError",
    "ScheduleRepository",
    "ShiftTemplateRepository",
    "TimeOffRepository",
    "WorkerRepository",
]
