"""Pytest configuration and shared fixtures."""

import datetime as dt

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from smart_scheduler.domain.models import (
    AvailabilitySubmission,
    Base,
    Branch,
    ShiftTemplate,
    Worker,
)

# A Monday
WEEK_START = dt.date(2025, 6, 2)


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (deselect with '-m \"not integration\"')"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def db_session():
    """Create in-memory database session for testing."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def week_start():
    return WEEK_START


@pytest.fixture
def make_branch():
    """Branch factory: open Mon-Fri 09:00-17:00, closed at the weekend by default."""

    def _make(branch_id="b1", start="09:00", end="17:00", open_days=None, **kwargs):
        open_days = open_days or ["monday", "tuesday", "wednesday", "thursday", "friday"]
        days = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
        opening_hours = {
            day: {"start": start, "end": end, "is_open": day in open_days}
            for day in days
        }
        kwargs.setdefault("rating_criteria", [])
        kwargs.setdefault("roles", [])
        kwargs.setdefault("job_titles", [])
        return Branch(id=branch_id, name=f"Branch {branch_id}", opening_hours=opening_hours, **kwargs)

    return _make


@pytest.fixture
def make_worker():
    """Worker factory."""

    def _make(worker_id, branch_id="b1", role="Staff", job_title=None, ratings=None, **kwargs):
        return Worker(
            id=worker_id,
            branch_id=branch_id,
            name=f"Worker {worker_id}",
            role=role,
            job_title=job_title,
            ratings=ratings or {},
            **kwargs,
        )

    return _make


@pytest.fixture
def make_template():
    """Shift template factory."""

    def _make(template_id, start="09:00", end="13:00", required=1, days=None, **kwargs):
        return ShiftTemplate(
            id=template_id,
            branch_id=kwargs.pop("branch_id", "b1"),
            name=kwargs.pop("name", template_id.title()),
            start_time=start,
            end_time=end,
            required_workers=required,
            priority=kwargs.pop("priority", 1),
            days=days if days is not None else ["monday"],
            job_title_requirements=kwargs.pop("job_title_requirements", {}),
        )

    return _make


@pytest.fixture
def make_submission():
    """Availability submission factory; ``shifts_by_day`` maps weekday -> accepted template ids."""
    counter = {"n": 0}

    def _make(worker_id, shifts_by_day, status="approved", week=WEEK_START, submitted_at=None):
        counter["n"] += 1
        return AvailabilitySubmission(
            id=f"sub-{worker_id}-{counter['n']}",
            worker_id=worker_id,
            week_start_date=week,
            availability={
                day: {"available": bool(ids), "shifts": list(ids)}
                for day, ids in shifts_by_day.items()
            },
            status=status,
            submitted_at=submitted_at or dt.datetime(2025, 5, 28, 12, 0, tzinfo=dt.timezone.utc),
        )

    return _make
