"""CSV import utilities to load data into database."""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Dict, List

import pandas as pd
from sqlalchemy.orm import Session

from smart_scheduler.domain.models import (
    AvailabilitySubmission,
    Branch,
    ShiftTemplate,
    TimeOffRequest,
    Worker,
    WorkerRestriction,
)
from smart_scheduler.services.timeplan import normalize_week_start

RATING_PREFIX = "rating:"


def _read(csv_path: str | Path) -> pd.DataFrame:
    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
    # Normalize column names, except the case of rating criteria
    df.columns = [
        c.strip() if c.strip().lower().startswith(RATING_PREFIX) else c.strip().lower()
        for c in df.columns
    ]
    return df


def _blank(value) -> bool:
    return value is None or str(value).strip() == ""


def _truthy(value) -> bool:
    return str(value).strip().upper() in ["TRUE", "T", "1", "YES", "Y"]


def _split(value) -> List[str]:
    if _blank(value):
        return []
    return [part.strip() for part in str(value).split(";") if part.strip()]


def _parse_requirements(value) -> Dict[str, int]:
    """Parse ``Cashier=1;Cook=2``."""
    requirements = {}
    for part in _split(value):
        title, _, count = part.partition("=")
        requirements[title.strip()] = int(count or 1)
    return requirements


def import_branches_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import branches, one row per branch and weekday.

    Columns: branch_id, name, day, start, end, is_open, rating_criteria (optional,
    ``;``-separated, read from the first row of each branch).

    Returns:
        Number of branches imported
    """
    df = _read(csv_path)
    df["day"] = df["day"].str.strip().str.lower()

    branches = []
    for branch_id, rows in df.groupby("branch_id", sort=False):
        first = rows.iloc[0]
        opening_hours = {
            row["day"]: {"start": row["start"], "end": row["end"], "is_open": _truthy(row["is_open"])}
            for _, row in rows.iterrows()
        }
        branches.append(
            Branch(
                id=str(branch_id),
                name=str(first["name"]),
                opening_hours=opening_hours,
                rating_criteria=_split(first.get("rating_criteria", "")),
                roles=[],
                job_titles=[],
            )
        )

    session.add_all(branches)
    session.commit()

    print(f"[INFO] Imported {len(branches)} branches from {csv_path}")
    return len(branches)


def import_workers_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import workers.

    Columns: id, branch_id, name, email, role, job_title, plus one
    ``rating:<criterion>`` column per rating criterion (blank = unrated).

    Returns:
        Number of workers imported
    """
    df = _read(csv_path)
    rating_columns = [c for c in df.columns if c.lower().startswith(RATING_PREFIX)]

    workers = []
    for _, row in df.iterrows():
        ratings = {
            col[len(RATING_PREFIX):].strip(): (0 if _blank(row[col]) else int(float(row[col])))
            for col in rating_columns
        }
        workers.append(
            Worker(
                id=str(row["id"]),
                branch_id=None if _blank(row.get("branch_id")) else str(row["branch_id"]),
                name=str(row["name"]),
                email=None if _blank(row.get("email")) else str(row["email"]),
                role=str(row.get("role", "")),
                job_title=None if _blank(row.get("job_title")) else str(row["job_title"]),
                ratings=ratings,
            )
        )

    session.add_all(workers)
    session.commit()

    print(f"[INFO] Imported {len(workers)} workers from {csv_path}")
    return len(workers)


def import_shift_templates_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import shift templates.

    Columns: id, branch_id, name, start_time, end_time, required_workers,
    priority, days (``;``-separated), job_title_requirements (``Title=count;...``).

    Returns:
        Number of templates imported
    """
    df = _read(csv_path)

    templates = []
    for _, row in df.iterrows():
        templates.append(
            ShiftTemplate(
                id=str(row["id"]),
                branch_id=None if _blank(row.get("branch_id")) else str(row["branch_id"]),
                name=str(row["name"]),
                start_time=str(row["start_time"]).strip(),
                end_time=str(row["end_time"]).strip(),
                required_workers=int(row.get("required_workers") or 1),
                priority=int(row.get("priority") or 1),
                days=[d.lower() for d in _split(row.get("days", ""))],
                job_title_requirements=_parse_requirements(row.get("job_title_requirements", "")),
            )
        )

    session.add_all(templates)
    session.commit()

    print(f"[INFO] Imported {len(templates)} shift templates from {csv_path}")
    return len(templates)


def import_availability_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import availability submissions, one row per worker, week and day.

    Columns: worker_id, week_start_date, day, available, shifts (``;``-separated
    template ids), status, submitted_at, manager_id (optional). Week starts are
    normalized to Monday. When a worker has several submissions for a week only
    the latest (by submitted_at) is kept.

    Returns:
        Number of submissions imported
    """
    df = _read(csv_path)
    df["day"] = df["day"].str.strip().str.lower()
    df["week_start_date"] = pd.to_datetime(df["week_start_date"]).dt.date.map(normalize_week_start)
    df["submitted_at"] = pd.to_datetime(df["submitted_at"], utc=True)

    # Deduplicate: keep latest submission per worker and week
    latest = df.groupby(["worker_id", "week_start_date"])["submitted_at"].transform("max")
    df = df[df["submitted_at"] == latest]

    submissions = []
    for (worker_id, week_start), rows in df.groupby(["worker_id", "week_start_date"], sort=False):
        first = rows.iloc[0]
        availability = {
            row["day"]: {"available": _truthy(row["available"]), "shifts": _split(row["shifts"])}
            for _, row in rows.iterrows()
        }
        submissions.append(
            AvailabilitySubmission(
                id=str(uuid.uuid4()),
                worker_id=str(worker_id),
                manager_id=None if _blank(first.get("manager_id")) else str(first["manager_id"]),
                week_start_date=week_start,
                availability=availability,
                status=str(first.get("status") or "pending").strip().lower(),
                submitted_at=first["submitted_at"].to_pydatetime(),
            )
        )

    # Replace what is already stored for the same worker and week
    for submission in submissions:
        (
            session.query(AvailabilitySubmission)
            .filter(
                AvailabilitySubmission.worker_id == submission.worker_id,
                AvailabilitySubmission.week_start_date == submission.week_start_date,
            )
            .delete(synchronize_session="fetch")
        )
    session.add_all(submissions)
    session.commit()

    print(f"[INFO] Imported {len(submissions)} availability submissions from {csv_path}")
    return len(submissions)


def import_time_off_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import time off requests.

    Columns: worker_id, start_date, end_date, status, reason (optional).

    Returns:
        Number of requests imported
    """
    df = _read(csv_path)
    df["start_date"] = pd.to_datetime(df["start_date"]).dt.date
    df["end_date"] = pd.to_datetime(df["end_date"]).dt.date

    requests = [
        TimeOffRequest(
            worker_id=str(row["worker_id"]),
            start_date=row["start_date"],
            end_date=row["end_date"],
            status=str(row.get("status") or "pending").strip().lower(),
            reason=None if _blank(row.get("reason")) else str(row["reason"]),
        )
        for _, row in df.iterrows()
    ]

    session.add_all(requests)
    session.commit()

    print(f"[INFO] Imported {len(requests)} time off requests from {csv_path}")
    return len(requests)


def import_restrictions_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import worker pairing restrictions.

    Columns: branch_id, worker1_id, worker2_id, reason (optional). Rows pairing a
    worker with themselves and repeated pairs (in either order) are skipped.

    Returns:
        Number of restrictions imported
    """
    df = _read(csv_path)

    seen = set()
    restrictions = []
    for _, row in df.iterrows():
        pair = frozenset((str(row["worker1_id"]), str(row["worker2_id"])))
        key = (str(row["branch_id"]), pair)
        if len(pair) < 2 or key in seen:
            print(f"[WARN] Skipping restriction {row['worker1_id']}<->{row['worker2_id']}")
            continue
        seen.add(key)
        restrictions.append(
            WorkerRestriction(
                branch_id=str(row["branch_id"]),
                worker1_id=str(row["worker1_id"]),
                worker2_id=str(row["worker2_id"]),
                reason=None if _blank(row.get("reason")) else str(row["reason"]),
            )
        )

    session.add_all(restrictions)
    session.commit()

    print(f"[INFO] Imported {len(restrictions)} restrictions from {csv_path}")
    return len(restrictions)
