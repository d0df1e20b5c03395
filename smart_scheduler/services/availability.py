"""Resolve which availability submission applies to a worker and week."""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from smart_scheduler.domain.models import AvailabilitySubmission

from .timeplan import to_date


def _submitted_key(submission: AvailabilitySubmission) -> datetime:
    submitted = submission.submitted_at
    if submitted is None:
        return datetime.min.replace(tzinfo=timezone.utc)
    if submitted.tzinfo is None:
        # SQLite hands back naive datetimes; treat them as UTC
        return submitted.replace(tzinfo=timezone.utc)
    return submitted


class AvailabilityResolver:
    """
    Read-only lookup over a worker population's availability submissions.

    Status is not filtered here: callers decide whether a pending or rejected
    submission is usable.
    """

    def __init__(self, submissions: Iterable[AvailabilitySubmission]):
        self._by_worker: Dict[str, List[AvailabilitySubmission]] = defaultdict(list)
        for submission in submissions:
            self._by_worker[submission.worker_id].append(submission)
        # Newest first, so the first match is the authoritative one
        for worker_submissions in self._by_worker.values():
            worker_submissions.sort(key=_submitted_key, reverse=True)

    def resolve(self, worker_id: str, week_start_date=None) -> Optional[AvailabilitySubmission]:
        """
        Get the submission for a worker.

        Args:
            worker_id: Worker to look up
            week_start_date: Monday of the target week (date, datetime or ISO
                string; time of day is ignored). ``None`` returns the most
                recently submitted submission for any week.

        Returns:
            The matching submission, or None
        """
        submissions = self._by_worker.get(worker_id, [])
        if week_start_date is None:
            return submissions[0] if submissions else None

        week = to_date(week_start_date)
        for submission in submissions:
            if to_date(submission.week_start_date) == week:
                return submission
        return None
