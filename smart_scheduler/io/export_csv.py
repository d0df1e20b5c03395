"""CSV export utilities."""

from __future__ import annotations

from pathlib import Path

import pandas as pd
from sqlalchemy.orm import Session

from smart_scheduler.domain.models import Schedule, ShiftTemplate, Worker
from smart_scheduler.domain.repositories import WorkerRepository
from smart_scheduler.services.timeplan import day_name

SCHEDULE_COLUMNS = [
    "schedule_id", "branch_id", "week_start_date", "date", "day", "shift_id",
    "template_id", "template", "start_time", "end_time", "worker_id", "worker_name",
]


def schedule_frame(session: Session, schedule: Schedule) -> pd.DataFrame:
    """
    One row per shift and assigned worker.

    Shifts with nobody assigned still get a row with an empty worker so the
    export shows every slot of the week.
    """
    template_ids = {s.template_id for s in schedule.shifts}
    templates = {
        t.id: t for t in session.query(ShiftTemplate).filter(ShiftTemplate.id.in_(template_ids)).all()
    }
    worker_ids = {w for s in schedule.shifts for w in (s.assigned_workers or [])}
    workers = {w.id: w for w in session.query(Worker).filter(Worker.id.in_(worker_ids)).all()}

    rows = []
    for shift in schedule.shifts:
        template = templates.get(shift.template_id)
        base = {
            "schedule_id": schedule.id,
            "branch_id": schedule.branch_id,
            "week_start_date": pd.Timestamp(schedule.week_start_date).strftime("%Y-%m-%d"),
            "date": pd.Timestamp(shift.date).strftime("%Y-%m-%d"),
            "day": day_name(shift.date),
            "shift_id": shift.id,
            "template_id": shift.template_id,
            "template": template.name if template is not None else "",
            "start_time": shift.start_time,
            "end_time": shift.end_time,
        }
        assigned = shift.assigned_workers or []
        if not assigned:
            rows.append({**base, "worker_id": "", "worker_name": ""})
        for worker_id in assigned:
            worker = workers.get(worker_id)
            rows.append({**base, "worker_id": worker_id, "worker_name": worker.name if worker else ""})

    return pd.DataFrame(rows, columns=SCHEDULE_COLUMNS)


def export_schedule_csv(session: Session, schedule: Schedule, out_path: str | Path) -> int:
    """
    Export a schedule to CSV.

    Returns:
        Number of worker assignments written (empty shifts not counted)
    """
    df = schedule_frame(session, schedule)
    df.to_csv(out_path, index=False)

    count = int((df["worker_id"] != "").sum())
    print(f"[INFO] Exported {count} assignments to {out_path}")
    return count


def export_workers_csv(session: Session, out_path: str | Path, branch_id: str | None = None) -> int:
    """
    Export workers with one ``rating:<criterion>`` column per criterion seen.

    Returns:
        Number of workers exported
    """
    if branch_id:
        workers = WorkerRepository.get_by_branch(session, branch_id)
    else:
        workers = WorkerRepository.get_all(session)

    criteria = sorted({c for w in workers for c in (w.ratings or {})})
    rows = []
    for w in workers:
        row = {
            "id": w.id,
            "branch_id": w.branch_id or "",
            "name": w.name,
            "email": w.email or "",
            "role": w.role or "",
            "job_title": w.job_title or "",
        }
        for criterion in criteria:
            row[f"rating:{criterion}"] = (w.ratings or {}).get(criterion, "")
        rows.append(row)

    columns = ["id", "branch_id", "name", "email", "role", "job_title"] + [f"rating:{c}" for c in criteria]
    pd.DataFrame(rows, columns=columns).to_csv(out_path, index=False)

    print(f"[INFO] Exported {len(rows)} workers to {out_path}")
    return len(rows)
