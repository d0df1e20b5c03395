"""Coverage reporting for generated schedules."""

from __future__ import annotations

from typing import Dict, List

import pandas as pd

from smart_scheduler.domain.models import Schedule, ShiftTemplate, Worker
from smart_scheduler.services.timeplan import calculate_shift_hours, day_name


def coverage_frame(schedule: Schedule, templates: Dict[str, ShiftTemplate]) -> pd.DataFrame:
    """One row per scheduled shift with required vs assigned headcount."""
    rows = []
    for shift in schedule.shifts:
        template = templates.get(shift.template_id)
        required = int(template.required_workers) if template is not None else 0
        assigned = len(shift.assigned_workers or [])
        rows.append(
            {
                "shift_id": shift.id,
                "date": pd.Timestamp(shift.date).strftime("%Y-%m-%d"),
                "day": day_name(shift.date),
                "template_id": shift.template_id,
                "template": template.name if template is not None else "(deleted)",
                "start_time": shift.start_time,
                "end_time": shift.end_time,
                "required": required,
                "assigned": assigned,
                "short": max(0, required - assigned),
            }
        )
    columns = ["shift_id", "date", "day", "template_id", "template", "start_time", "end_time",
               "required", "assigned", "short"]
    return pd.DataFrame(rows, columns=columns)


def understaffed_shifts(schedule: Schedule, templates: Dict[str, ShiftTemplate]) -> pd.DataFrame:
    """Shifts with fewer workers than their template requires."""
    df = coverage_frame(schedule, templates)
    return df[df["short"] > 0].reset_index(drop=True)


def worker_hours(schedule: Schedule, workers: Dict[str, Worker] | None = None) -> pd.Series:
    """Total scheduled hours per worker (name when known, id otherwise)."""
    rows: List[dict] = []
    for shift in schedule.shifts:
        hours = calculate_shift_hours(shift.start_time, shift.end_time)
        for worker_id in shift.assigned_workers or []:
            worker = (workers or {}).get(worker_id)
            rows.append({"worker": worker.name if worker is not None else worker_id, "hours": hours})
    if not rows:
        return pd.Series(dtype=float, name="hours")
    df = pd.DataFrame(rows)
    return df.groupby("worker")["hours"].sum().sort_values(ascending=False)


def summarize_schedule(
    schedule: Schedule,
    templates: Dict[str, ShiftTemplate],
    workers: Dict[str, Worker] | None = None,
) -> str:
    if not schedule.shifts:
        return "No shifts."

    coverage = coverage_frame(schedule, templates)
    short = coverage[coverage["short"] > 0]

    lines = [f"Schedule {schedule.id} for week {schedule.week_start_date}:"]
    lines.append(
        coverage[["date", "day", "template", "start_time", "end_time", "required", "assigned"]]
        .to_string(index=False)
    )
    lines.append("")
    if short.empty:
        lines.append("All shifts fully staffed.")
    else:
        lines.append(f"Under-staffed shifts ({len(short)}), missing {int(short['short'].sum())} worker(s):")
        lines.append(short[["date", "template", "required", "assigned"]].to_string(index=False))
    lines.append("")
    lines.append("Hours per worker (week):")
    hours = worker_hours(schedule, workers)
    lines.append(hours.to_string() if not hours.empty else "(none)")
    return "\n".join(lines)
