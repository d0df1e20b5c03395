"""Repository classes for data access."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .models import (
    AvailabilitySubmission,
    Branch,
    Schedule,
    ShiftTemplate,
    TimeOffRequest,
    Worker,
    WorkerRestriction,
)
from smart_scheduler.services.timeplan import normalize_week_start


class ScheduleConflictError(RuntimeError):
    """An active schedule already exists for the branch and week."""


class BranchRepository:
    """Repository for branch data access."""

    @staticmethod
    def get_all(session: Session) -> List[Branch]:
        return session.query(Branch).order_by(Branch.name).all()

    @staticmethod
    def get_by_id(session: Session, branch_id: str) -> Optional[Branch]:
        return session.get(Branch, branch_id)

    @staticmethod
    def create(session: Session, branch: Branch) -> Branch:
        session.add(branch)
        session.commit()
        session.refresh(branch)
        return branch

    @staticmethod
    def update_preferences(session: Session, branch_id: str, updates: Dict) -> Optional[Branch]:
        """Merge partial scheduling preference updates into the stored ones."""
        branch = session.get(Branch, branch_id)
        if branch is None:
            return None
        merged = dict(branch.scheduling_preferences or {})
        merged.update(updates)
        branch.scheduling_preferences = merged
        session.commit()
        return branch


class WorkerRepository:
    """Repository for worker data access."""

    @staticmethod
    def get_all(session: Session) -> List[Worker]:
        return session.query(Worker).all()

    @staticmethod
    def get_by_id(session: Session, worker_id: str) -> Optional[Worker]:
        return session.get(Worker, worker_id)

    @staticmethod
    def get_by_branch(session: Session, branch_id: str) -> List[Worker]:
        """Workers of a branch in creation order."""
        return (
            session.query(Worker)
            .filter(Worker.branch_id == branch_id)
            .order_by(Worker.created_at, Worker.id)
            .all()
        )

    @staticmethod
    def bulk_create(session: Session, workers: List[Worker]) -> None:
        session.add_all(workers)
        session.commit()


class ShiftTemplateRepository:
    """Repository for shift template data access."""

    @staticmethod
    def get_by_branch(session: Session, branch_id: str) -> List[ShiftTemplate]:
        return (
            session.query(ShiftTemplate)
            .filter(ShiftTemplate.branch_id == branch_id)
            .order_by(ShiftTemplate.start_time, ShiftTemplate.id)
            .all()
        )

    @staticmethod
    def bulk_create(session: Session, templates: List[ShiftTemplate]) -> None:
        session.add_all(templates)
        session.commit()


class AvailabilityRepository:
    """Repository for availability submissions."""

    @staticmethod
    def get_by_worker(session: Session, worker_id: str) -> List[AvailabilitySubmission]:
        return (
            session.query(AvailabilitySubmission)
            .filter(AvailabilitySubmission.worker_id == worker_id)
            .order_by(AvailabilitySubmission.submitted_at)
            .all()
        )

    @staticmethod
    def get_for_workers(session: Session, worker_ids: List[str]) -> List[AvailabilitySubmission]:
        if not worker_ids:
            return []
        return (
            session.query(AvailabilitySubmission)
            .filter(AvailabilitySubmission.worker_id.in_(worker_ids))
            .all()
        )

    @staticmethod
    def get_by_week(session: Session, week_start_date: date) -> List[AvailabilitySubmission]:
        return (
            session.query(AvailabilitySubmission)
            .filter(AvailabilitySubmission.week_start_date == week_start_date)
            .all()
        )

    @staticmethod
    def submit(
        session: Session,
        worker_id: str,
        week_start_date: date,
        availability: Dict,
        manager_id: str | None = None,
    ) -> AvailabilitySubmission:
        """
        Store a worker's availability for a week, replacing any earlier submission.

        The week is normalised to its Monday. New submissions always start as
        ``pending``.
        """
        week_start_date = normalize_week_start(week_start_date)
        (
            session.query(AvailabilitySubmission)
            .filter(
                AvailabilitySubmission.worker_id == worker_id,
                AvailabilitySubmission.week_start_date == week_start_date,
            )
            .delete(synchronize_session="fetch")
        )
        submission = AvailabilitySubmission(
            id=str(uuid.uuid4()),
            worker_id=worker_id,
            manager_id=manager_id,
            week_start_date=week_start_date,
            availability=availability,
            status="pending",
            submitted_at=datetime.now(timezone.utc),
        )
        session.add(submission)
        session.commit()
        return submission

    @staticmethod
    def set_status(session: Session, submission_id: str, status: str) -> Optional[AvailabilitySubmission]:
        """Approve or reject a submission."""
        submission = session.get(AvailabilitySubmission, submission_id)
        if submission is None:
            return None
        submission.status = status
        session.commit()
        return submission

    @staticmethod
    def bulk_create(session: Session, submissions: List[AvailabilitySubmission]) -> None:
        session.add_all(submissions)
        session.commit()


class TimeOffRepository:
    """Repository for time off requests."""

    @staticmethod
    def get_for_workers(session: Session, worker_ids: List[str]) -> List[TimeOffRequest]:
        if not worker_ids:
            return []
        return session.query(TimeOffRequest).filter(TimeOffRequest.worker_id.in_(worker_ids)).all()

    @staticmethod
    def request(
        session: Session,
        worker_id: str,
        start_date: date,
        end_date: date,
        reason: str | None = None,
    ) -> TimeOffRequest:
        """
        File a time off request covering ``start_date``..``end_date`` inclusive.

        Requests start as ``pending`` and only block scheduling once approved.

        Raises:
            ValueError: If the range ends before it starts
        """
        if end_date < start_date:
            raise ValueError(f"Time off ends ({end_date}) before it starts ({start_date})")
        request = TimeOffRequest(
            worker_id=worker_id,
            start_date=start_date,
            end_date=end_date,
            status="pending",
            reason=reason,
        )
        session.add(request)
        session.commit()
        return request

    @staticmethod
    def set_status(session: Session, request_id: int, status: str) -> Optional[TimeOffRequest]:
        """Approve or reject a time off request."""
        request = session.get(TimeOffRequest, request_id)
        if request is None:
            return None
        request.status = status
        session.commit()
        return request

    @staticmethod
    def bulk_create(session: Session, requests: List[TimeOffRequest]) -> None:
        session.add_all(requests)
        session.commit()


class RestrictionRepository:
    """Repository for worker pairing restrictions."""

    @staticmethod
    def get_by_branch(session: Session, branch_id: str) -> List[WorkerRestriction]:
        return session.query(WorkerRestriction).filter(WorkerRestriction.branch_id == branch_id).all()

    @staticmethod
    def create(session: Session, restriction: WorkerRestriction) -> WorkerRestriction:
        """Add a restriction; rejects self-pairs and pairs that already exist in either order."""
        if restriction.worker1_id == restriction.worker2_id:
            raise ValueError("A worker cannot be restricted from working with themselves")
        pair = {restriction.worker1_id, restriction.worker2_id}
        for existing in RestrictionRepository.get_by_branch(session, restriction.branch_id):
            if {existing.worker1_id, existing.worker2_id} == pair:
                raise ValueError(
                    f"Restriction between {restriction.worker1_id} and {restriction.worker2_id} already exists"
                )
        session.add(restriction)
        session.commit()
        session.refresh(restriction)
        return restriction


class ScheduleRepository:
    """Repository for generated schedules."""

    @staticmethod
    def get_by_id(session: Session, schedule_id: str) -> Optional[Schedule]:
        return session.get(Schedule, schedule_id)

    @staticmethod
    def list_for_branch(session: Session, branch_id: str, include_archived: bool = True) -> List[Schedule]:
        query = session.query(Schedule).filter(Schedule.branch_id == branch_id)
        if not include_archived:
            query = query.filter(Schedule.archived.is_(False))
        return query.order_by(Schedule.week_start_date.desc()).all()

    @staticmethod
    def get_for_week(session: Session, branch_id: str, week_start_date: date) -> Optional[Schedule]:
        """The active (non-archived) schedule of a branch for a week, if any."""
        return (
            session.query(Schedule)
            .filter(
                Schedule.branch_id == branch_id,
                Schedule.week_start_date == week_start_date,
                Schedule.archived.is_(False),
            )
            .first()
        )

    @staticmethod
    def save(session: Session, schedule: Schedule, replace_existing: bool = False) -> Schedule:
        """
        Persist a newly generated schedule.

        Args:
            session: Database session
            schedule: Unsaved schedule
            replace_existing: Delete the current active schedule for the same week first

        Raises:
            ScheduleConflictError: An active schedule for the week exists (or was
                inserted concurrently) and ``replace_existing`` is False
        """
        existing = ScheduleRepository.get_for_week(session, schedule.branch_id, schedule.week_start_date)
        if existing is not None and existing.id != schedule.id:
            if not replace_existing:
                raise ScheduleConflictError(
                    f"Branch {schedule.branch_id} already has schedule {existing.id} "
                    f"for week {schedule.week_start_date}"
                )
            session.delete(existing)
            session.flush()
            print(f"[INFO] Replaced schedule {existing.id} for week {schedule.week_start_date}")

        session.add(schedule)
        try:
            session.commit()
        except IntegrityError as e:
            session.rollback()
            raise ScheduleConflictError(
                f"Concurrent schedule saved for branch {schedule.branch_id} week {schedule.week_start_date}"
            ) from e
        return schedule

    @staticmethod
    def touch(session: Session, schedule: Schedule) -> None:
        """Commit edits to a schedule, bumping its version."""
        schedule.updated_at = datetime.now(timezone.utc)
        session.commit()

    @staticmethod
    def delete(session: Session, schedule_id: str) -> bool:
        schedule = session.get(Schedule, schedule_id)
        if schedule is None:
            return False
        session.delete(schedule)
        session.commit()
        return True

    @staticmethod
    def archive(session: Session, schedule_id: str) -> bool:
        return ScheduleRepository._set_archived(session, schedule_id, True)

    @staticmethod
    def restore(session: Session, schedule_id: str) -> bool:
        """Un-archive; fails with ScheduleConflictError if the week already has an active schedule."""
        return ScheduleRepository._set_archived(session, schedule_id, False)

    @staticmethod
    def _set_archived(session: Session, schedule_id: str, archived: bool) -> bool:
        schedule = session.get(Schedule, schedule_id)
        if schedule is None:
            return False
        schedule.archived = archived
        schedule.updated_at = datetime.now(timezone.utc)
        try:
            session.commit()
        except IntegrityError as e:
            session.rollback()
            raise ScheduleConflictError(
                f"Cannot restore schedule {schedule_id}: week {schedule.week_start_date} has an active schedule"
            ) from e
        return True
