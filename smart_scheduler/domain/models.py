"""SQLAlchemy models for the workforce scheduling system."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.ext.mutable import MutableDict, MutableList
from sqlalchemy.orm import DeclarativeBase, relationship, validates


AVAILABILITY_STATUSES = ("pending", "approved", "rejected")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class Branch(Base):
    """A branch with its opening hours and scheduling settings."""

    __tablename__ = "branches"

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    franchise_id = Column(String(64), nullable=True)

    # {"monday": {"start": "09:00", "end": "17:00", "is_open": true}, ...}
    opening_hours = Column(MutableDict.as_mutable(JSON), nullable=False, default=dict)
    rating_criteria = Column(MutableList.as_mutable(JSON), nullable=False, default=list)
    roles = Column(MutableList.as_mutable(JSON), nullable=False, default=list)
    job_titles = Column(MutableList.as_mutable(JSON), nullable=False, default=list)
    # Partial SchedulingPreferences overrides saved by the branch manager
    scheduling_preferences = Column(MutableDict.as_mutable(JSON), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    shift_templates = relationship(
        "ShiftTemplate", back_populates="branch", cascade="all, delete-orphan"
    )
    workers = relationship("Worker", back_populates="branch")
    restrictions = relationship(
        "WorkerRestriction", back_populates="branch", cascade="all, delete-orphan"
    )

    def hours_for(self, day: str) -> dict | None:
        return (self.opening_hours or {}).get(day.lower())

    def is_open_on(self, day: str) -> bool:
        hours = self.hours_for(day)
        return bool(hours and hours.get("is_open"))

    def __repr__(self) -> str:
        return f"<Branch(id={self.id}, name='{self.name}')>"


class Worker(Base):
    """Worker with ratings, role and job title."""

    __tablename__ = "workers"

    id = Column(String(64), primary_key=True)
    branch_id = Column(String(64), ForeignKey("branches.id"), nullable=True)
    name = Column(String(200), nullable=False)
    email = Column(String(200), nullable=True)
    role = Column(String(100), nullable=False, default="")  # free text, e.g. "Shift Manager"
    job_title = Column(String(100), nullable=True)

    # criterion -> 1..5, 0 = unrated
    ratings = Column(MutableDict.as_mutable(JSON), nullable=False, default=dict)
    # Legacy per-day window: {"monday": {"start": "09:00", "end": "17:00", "available": true}}
    availability = Column(MutableDict.as_mutable(JSON), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    branch = relationship("Branch", back_populates="workers")

    def __repr__(self) -> str:
        return f"<Worker(id={self.id}, name='{self.name}', role='{self.role}')>"


class ShiftTemplate(Base):
    """Recurring shift definition used to generate weekly shifts."""

    __tablename__ = "shift_templates"

    id = Column(String(64), primary_key=True)
    branch_id = Column(String(64), ForeignKey("branches.id"), nullable=True)
    name = Column(String(200), nullable=False)
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)  # HH:MM, same day
    required_workers = Column(Integer, nullable=False, default=1)
    priority = Column(Integer, nullable=False, default=1)  # 1-5
    # Lowercase weekday names; empty means Monday-Friday
    days = Column(MutableList.as_mutable(JSON), nullable=True)
    # job title -> required count
    job_title_requirements = Column(MutableDict.as_mutable(JSON), nullable=True)

    branch = relationship("Branch", back_populates="shift_templates")

    @validates("start_time", "end_time")
    def _validate_time(self, key, value):
        try:
            parsed = datetime.strptime(value, "%H:%M")
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid {key} '{value}', expected HH:MM") from e

        # Shifts are same-day: end must be after start
        other = self.end_time if key == "start_time" else self.start_time
        if other is not None:
            start, end = (parsed, datetime.strptime(other, "%H:%M"))
            if key == "end_time":
                start, end = end, start
            if end <= start:
                raise ValueError(
                    f"Shift template {self.id} must end after it starts "
                    f"({start.strftime('%H:%M')}-{end.strftime('%H:%M')})"
                )
        return value

    @validates("required_workers")
    def _validate_required(self, key, value):
        if value is not None and int(value) < 1:
            raise ValueError("required_workers must be at least 1")
        return value

    def __repr__(self) -> str:
        return f"<ShiftTemplate(id={self.id}, name='{self.name}', {self.start_time}-{self.end_time})>"


class AvailabilitySubmission(Base):
    """A worker's weekly availability, as submitted for manager approval."""

    __tablename__ = "availability_submissions"

    id = Column(String(64), primary_key=True)
    worker_id = Column(String(64), nullable=False, index=True)
    manager_id = Column(String(64), nullable=True)
    week_start_date = Column(Date, nullable=False)  # Monday of the target week
    # {"monday": {"available": true, "shifts": ["tpl-1"]}, ...}
    availability = Column(MutableDict.as_mutable(JSON), nullable=False, default=dict)
    status = Column(String(20), nullable=False, default="pending")
    submitted_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    @validates("status")
    def _validate_status(self, key, value):
        if value not in AVAILABILITY_STATUSES:
            raise ValueError(f"Invalid availability status '{value}'")
        return value

    def __repr__(self) -> str:
        return (
            f"<AvailabilitySubmission(id={self.id}, worker={self.worker_id}, "
            f"week={self.week_start_date}, status={self.status})>"
        )


class TimeOffRequest(Base):
    """Time off request covering [start_date, end_date] inclusive."""

    __tablename__ = "time_off_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    worker_id = Column(String(64), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    reason = Column(Text, nullable=True)

    @validates("status")
    def _validate_status(self, key, value):
        if value not in AVAILABILITY_STATUSES:
            raise ValueError(f"Invalid time off status '{value}'")
        return value

    def __repr__(self) -> str:
        return f"<TimeOffRequest(worker={self.worker_id}, {self.start_date}..{self.end_date}, status={self.status})>"


class WorkerRestriction(Base):
    """Two workers who must not be scheduled on the same shift."""

    __tablename__ = "worker_restrictions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    branch_id = Column(String(64), ForeignKey("branches.id"), nullable=False)
    worker1_id = Column(String(64), nullable=False)
    worker2_id = Column(String(64), nullable=False)
    reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    created_by = Column(String(64), nullable=True)

    branch = relationship("Branch", back_populates="restrictions")

    def __repr__(self) -> str:
        return f"<WorkerRestriction(branch={self.branch_id}, {self.worker1_id}<->{self.worker2_id})>"


class Schedule(Base):
    """A generated week of shifts for one branch."""

    __tablename__ = "schedules"

    id = Column(String(64), primary_key=True)
    branch_id = Column(String(64), nullable=False, index=True)
    week_start_date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True)
    archived = Column(Boolean, nullable=False, default=False)
    version = Column(Integer, nullable=False)

    shifts = relationship(
        "ScheduledShift",
        back_populates="schedule",
        cascade="all, delete-orphan",
        order_by="[ScheduledShift.date, ScheduledShift.start_time]",
    )

    __mapper_args__ = {"version_id_col": version}
    __table_args__ = (
        # At most one active schedule per branch and week
        Index(
            "uq_schedules_active_week",
            "branch_id",
            "week_start_date",
            unique=True,
            sqlite_where=text("archived = 0"),
            postgresql_where=text("NOT archived"),
        ),
    )

    def get_shift(self, shift_id: str) -> "ScheduledShift | None":
        return next((s for s in self.shifts if s.id == shift_id), None)

    def __repr__(self) -> str:
        return f"<Schedule(id={self.id}, branch={self.branch_id}, week={self.week_start_date}, shifts={len(self.shifts)})>"


class ScheduledShift(Base):
    """A concrete shift on a date, with times copied from its template."""

    __tablename__ = "scheduled_shifts"

    id = Column(String(64), primary_key=True)
    schedule_id = Column(String(64), ForeignKey("schedules.id"), nullable=True)
    # No foreign key: templates may be edited or removed after generation
    template_id = Column(String(64), nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    assigned_workers = Column(MutableList.as_mutable(JSON), nullable=False, default=list)

    schedule = relationship("Schedule", back_populates="shifts")

    def __repr__(self) -> str:
        return (
            f"<ScheduledShift(id={self.id}, template={self.template_id}, date={self.date}, "
            f"{self.start_time}-{self.end_time}, workers={list(self.assigned_workers or [])})>"
        )
