"""Services for scheduling logic."""

from .availability import AvailabilityResolver
from .eligibility import TimeOffCalendar, is_worker_eligible
from .restrictions import RestrictionIndex, has_worker_restriction
from .scoring import calculate_worker_score
from .timeplan import calculate_shift_hours, normalize_week_start
from .tracker import ConflictTracker, has_time_overlap

__all__ = [
    "AvailabilityResolver",
    "TimeOffCalendar",
    "is_worker_eligible",
    "RestrictionIndex",
    "has_worker_restriction",
    "calculate_worker_score",
    "calculate_shift_hours",
    "normalize_week_start",
    "ConflictTracker",
    "has_time_overlap",
]
