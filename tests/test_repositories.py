"""Tests for schedule persistence, archiving and manual edits."""

import datetime as dt

import pytest
from sqlalchemy.orm.exc import StaleDataError

from smart_scheduler.domain.context import load_scheduling_context
from smart_scheduler.domain.db import get_session, init_database, session_scope
from smart_scheduler.domain.models import Schedule
from smart_scheduler.domain.repositories import (
    BranchRepository,
    ScheduleConflictError,
    ScheduleRepository,
    TimeOffRepository,
)
from smart_scheduler.engine.orchestrator import build_week_schedule
from smart_scheduler.engine.reassign import apply_shift_switch, move_worker_to_shift

MONDAY = dt.date(2025, 6, 2)


def _seed(session, make_branch, make_worker, make_template, make_submission):
    session.add(make_branch("b1"))
    session.add_all([make_worker("w1"), make_worker("w2")])
    session.add_all([
        make_template("am", days=["monday", "tuesday"]),
        make_template("pm", start="13:00", end="17:00", days=["monday", "tuesday"]),
    ])
    session.add_all([
        make_submission("w1", {"monday": ["am", "pm"], "tuesday": ["am"]}),
        make_submission("w2", {"monday": ["am"], "tuesday": ["am", "pm"]}),
    ])
    session.commit()


@pytest.fixture
def seeded(db_session, make_branch, make_worker, make_template, make_submission):
    _seed(db_session, make_branch, make_worker, make_template, make_submission)
    return db_session


def test_load_scheduling_context(seeded):
    """The context bundles the branch's data."""
    context = load_scheduling_context(seeded, "b1")
    assert context.branch_id == "b1"
    assert {w.id for w in context.workers} == {"w1", "w2"}
    assert [t.id for t in context.shift_templates] == ["am", "pm"]
    assert len(context.availability_submissions) == 2
    assert load_scheduling_context(seeded, "nope").branch is None


def test_build_and_persist(seeded):
    """Generated schedules are saved with their shifts."""
    schedule = build_week_schedule(seeded, "b1", MONDAY)

    stored = ScheduleRepository.get_for_week(seeded, "b1", MONDAY)
    assert stored.id == schedule.id
    assert len(stored.shifts) == 4
    assert stored.version == 1
    # Shifts come back in date then start time order
    assert [(s.date, s.start_time) for s in stored.shifts] == sorted((s.date, s.start_time) for s in stored.shifts)


def test_second_generation_conflicts(seeded):
    """Only one active schedule per branch and week."""
    first = build_week_schedule(seeded, "b1", MONDAY)
    with pytest.raises(ScheduleConflictError):
        build_week_schedule(seeded, "b1", "2025-06-04")

    second = build_week_schedule(seeded, "b1", MONDAY, replace_existing=True)
    assert ScheduleRepository.get_by_id(seeded, first.id) is None
    assert ScheduleRepository.get_for_week(seeded, "b1", MONDAY).id == second.id


def test_unknown_branch_is_precondition_error(seeded):
    """Generating for a missing branch fails before any write."""
    with pytest.raises(ValueError, match="No branch selected"):
        build_week_schedule(seeded, "missing", MONDAY)
    assert seeded.query(Schedule).count() == 0


def test_archive_and_restore(seeded):
    """Archived schedules free the week; restoring onto an occupied week fails."""
    old = build_week_schedule(seeded, "b1", MONDAY)
    assert ScheduleRepository.archive(seeded, old.id)

    new = build_week_schedule(seeded, "b1", MONDAY)
    assert len(ScheduleRepository.list_for_branch(seeded, "b1")) == 2
    assert [s.id for s in ScheduleRepository.list_for_branch(seeded, "b1", include_archived=False)] == [new.id]

    with pytest.raises(ScheduleConflictError):
        ScheduleRepository.restore(seeded, old.id)

    assert ScheduleRepository.delete(seeded, new.id)
    assert ScheduleRepository.restore(seeded, old.id)
    assert ScheduleRepository.get_for_week(seeded, "b1", MONDAY).id == old.id
    assert not ScheduleRepository.archive(seeded, "missing")


def test_move_worker(seeded):
    """Moving takes the worker off one shift and onto another."""
    schedule = build_week_schedule(seeded, "b1", MONDAY)
    source = next(s for s in schedule.shifts if s.date == MONDAY and s.template_id == "pm")
    target = next(s for s in schedule.shifts if s.date == MONDAY + dt.timedelta(days=1) and s.template_id == "am")
    source.assigned_workers = ["w1"]
    target.assigned_workers = ["w2"]

    assert move_worker_to_shift(schedule, "w1", source.id, target.id)
    ScheduleRepository.touch(seeded, schedule)

    stored = ScheduleRepository.get_by_id(seeded, schedule.id)
    assert stored.get_shift(source.id).assigned_workers == []
    assert stored.get_shift(target.id).assigned_workers == ["w2", "w1"]
    assert stored.version == 2

    # Moving onto a shift the worker already holds doesn't duplicate them
    assert move_worker_to_shift(schedule, "w2", source.id, target.id)
    assert stored.get_shift(target.id).assigned_workers.count("w2") == 1
    assert not move_worker_to_shift(schedule, "w1", source.id, "missing")


def test_apply_shift_switch(seeded):
    """An approved switch swaps the two workers."""
    schedule = build_week_schedule(seeded, "b1", MONDAY)
    monday_am = next(s for s in schedule.shifts if s.date == MONDAY and s.template_id == "am")
    tuesday_pm = next(s for s in schedule.shifts if s.date == MONDAY + dt.timedelta(days=1) and s.template_id == "pm")
    monday_am.assigned_workers = ["w1"]
    tuesday_pm.assigned_workers = ["w2"]

    assert apply_shift_switch(schedule, "w1", monday_am.id, "w2", tuesday_pm.id)
    ScheduleRepository.touch(seeded, schedule)

    stored = ScheduleRepository.get_by_id(seeded, schedule.id)
    assert stored.get_shift(monday_am.id).assigned_workers == ["w2"]
    assert stored.get_shift(tuesday_pm.id).assigned_workers == ["w1"]
    assert not apply_shift_switch(schedule, "w1", "missing", "w2", tuesday_pm.id)


def test_update_branch_preferences(seeded):
    """Stored preferences are merged and used for generation."""
    BranchRepository.update_preferences(seeded, "b1", {"max_hours_per_week": 4})
    BranchRepository.update_preferences(seeded, "b1", {"balance_workload": False})

    branch = BranchRepository.get_by_id(seeded, "b1")
    assert branch.scheduling_preferences == {"max_hours_per_week": 4, "balance_workload": False}

    schedule = build_week_schedule(seeded, "b1", MONDAY, persist=False)
    per_worker = {}
    for shift in schedule.shifts:
        for worker_id in shift.assigned_workers:
            per_worker[worker_id] = per_worker.get(worker_id, 0) + 1
    assert all(count == 1 for count in per_worker.values())


@pytest.mark.integration
def test_concurrent_edit_is_stale(tmp_path, make_branch, make_worker, make_template, make_submission):
    """A second editor working from an old version cannot overwrite newer edits."""
    db_url = f"sqlite:///{tmp_path / 'scheduler.db'}"
    init_database(db_url)

    with session_scope(db_url) as session:
        _seed(session, make_branch, make_worker, make_template, make_submission)
        schedule_id = build_week_schedule(session, "b1", MONDAY).id

    first = get_session(db_url)
    second = get_session(db_url)
    try:
        mine = ScheduleRepository.get_by_id(first, schedule_id)
        assert mine.version == 1

        theirs = ScheduleRepository.get_by_id(second, schedule_id)
        ScheduleRepository.touch(second, theirs)

        with pytest.raises(StaleDataError):
            ScheduleRepository.touch(first, mine)
        first.rollback()
    finally:
        first.close()
        second.close()


def test_time_off_request_rejects_inverted_range(db_session):
    """Time off cannot end before it starts."""
    with pytest.raises(ValueError, match="before it starts"):
        TimeOffRepository.request(db_session, "w1", MONDAY, MONDAY - dt.timedelta(days=1))


def test_only_approved_time_off_blocks_generation(seeded):
    """A pending request leaves the worker schedulable until a manager approves it."""
    request = TimeOffRepository.request(seeded, "w1", MONDAY, MONDAY, reason="Dentist")
    assert request.status == "pending"

    schedule = build_week_schedule(seeded, "b1", MONDAY, persist=False)
    monday_workers = {w for s in schedule.shifts if s.date == MONDAY for w in s.assigned_workers}
    assert "w1" in monday_workers

    TimeOffRepository.set_status(seeded, request.id, "approved")
    schedule = build_week_schedule(seeded, "b1", MONDAY, persist=False)
    monday_workers = {w for s in schedule.shifts if s.date == MONDAY for w in s.assigned_workers}
    assert "w1" not in monday_workers
    assert TimeOffRepository.set_status(seeded, 999, "approved") is None
