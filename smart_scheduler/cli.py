"""Command-line interface for the smart shift scheduler."""

from __future__ import annotations

import argparse

from smart_scheduler.config import load_config
from smart_scheduler.domain.context import load_scheduling_context
from smart_scheduler.domain.db import get_session, init_database, reset_database
from smart_scheduler.domain.repositories import ScheduleRepository
from smart_scheduler.engine.orchestrator import Orchestrator, build_week_schedule
from smart_scheduler.io.export_csv import export_schedule_csv, export_workers_csv
from smart_scheduler.io.import_csv import (
    import_availability_csv,
    import_branches_csv,
    import_restrictions_csv,
    import_shift_templates_csv,
    import_time_off_csv,
    import_workers_csv,
)
from smart_scheduler.services.constraints import validate_schedule
from smart_scheduler.services.timeplan import normalize_week_start, to_date
from smart_scheduler.validator import summarize_schedule


def _db_url(args: argparse.Namespace) -> str:
    if args.db:
        return args.db
    return load_config(getattr(args, "config", None)).database_url


def _find_schedule(session, args: argparse.Namespace):
    """Schedule by --schedule id, or the active one for --branch/--week."""
    if getattr(args, "schedule", None):
        schedule = ScheduleRepository.get_by_id(session, args.schedule)
    else:
        if not (args.branch and args.week):
            raise ValueError("Pass --schedule, or both --branch and --week")
        week_start = normalize_week_start(to_date(args.week))
        schedule = ScheduleRepository.get_for_week(session, args.branch, week_start)
    if schedule is None:
        raise ValueError("Schedule not found")
    return schedule


def _cmd_init_db(args: argparse.Namespace) -> None:
    """Initialize the database."""
    db_url = _db_url(args)
    if args.reset:
        reset_database(db_url)
    else:
        init_database(db_url)
    print(f"[OK] Database initialized: {db_url}")


def _cmd_import_csv(args: argparse.Namespace) -> None:
    """Import CSV data into database."""
    session = get_session(_db_url(args))

    # Order matters: workers and templates reference branches
    steps = [
        (args.branches, import_branches_csv, "branches"),
        (args.workers, import_workers_csv, "workers"),
        (args.templates, import_shift_templates_csv, "shift templates"),
        (args.availability, import_availability_csv, "availability submissions"),
        (args.time_off, import_time_off_csv, "time off requests"),
        (args.restrictions, import_restrictions_csv, "restrictions"),
    ]
    try:
        for path, importer, label in steps:
            if path:
                count = importer(session, path)
                print(f"[OK] Imported {count} {label}")

        session.close()
        print("[OK] CSV import complete")

    except Exception as e:
        session.rollback()
        session.close()
        print(f"[ERROR] Import failed: {e}")
        raise


def _cmd_generate(args: argparse.Namespace) -> None:
    """Generate schedule for a week."""
    cfg = load_config(args.config)
    session = get_session(args.db or cfg.database_url)

    try:
        template_ids = [t.strip() for t in args.templates.split(",") if t.strip()] if args.templates else None

        schedule = build_week_schedule(
            session,
            args.branch,
            args.week,
            selected_template_ids=template_ids,
            cfg=cfg,
            persist=True,
            replace_existing=args.replace,
        )

        if args.out:
            export_schedule_csv(session, schedule, args.out)

        assigned = sum(len(s.assigned_workers or []) for s in schedule.shifts)
        session.close()
        print(f"[OK] Generated schedule {schedule.id}: {len(schedule.shifts)} shifts, {assigned} assignments")

    except Exception as e:
        session.rollback()
        session.close()
        print(f"[ERROR] Generation failed: {e}")
        raise


def _cmd_export(args: argparse.Namespace) -> None:
    """Export data from database to CSV."""
    session = get_session(_db_url(args))

    try:
        if args.out:
            schedule = _find_schedule(session, args)
            count = export_schedule_csv(session, schedule, args.out)
            print(f"[OK] Exported {count} assignments to {args.out}")

        if args.workers:
            count = export_workers_csv(session, args.workers, branch_id=args.branch)
            print(f"[OK] Exported {count} workers to {args.workers}")

        session.close()

    except Exception as e:
        session.close()
        print(f"[ERROR] Export failed: {e}")
        raise


def _cmd_validate(args: argparse.Namespace) -> None:
    """Re-check a stored schedule against the hard constraints."""
    cfg = load_config(args.config)
    session = get_session(args.db or cfg.database_url)

    try:
        schedule = _find_schedule(session, args)
        context = load_scheduling_context(session, schedule.branch_id)
        prefs = Orchestrator(cfg).resolve_preferences(context)
        validate_schedule(schedule, context, prefs, cfg)

        session.close()
        print(f"[OK] Validation passed for schedule {schedule.id}")

    except Exception as e:
        session.close()
        print(f"[ERROR] Validation failed: {e}")
        raise


def _cmd_summarize(args: argparse.Namespace) -> None:
    """Print a coverage report for a stored schedule."""
    session = get_session(_db_url(args))

    try:
        schedule = _find_schedule(session, args)
        context = load_scheduling_context(session, schedule.branch_id)
        print(summarize_schedule(schedule, context.templates_by_id(), context.workers_by_id()))
        session.close()

    except Exception as e:
        session.close()
        print(f"[ERROR] Summary failed: {e}")
        raise


def _cmd_archive(args: argparse.Namespace) -> None:
    """Archive (or restore) a schedule."""
    session = get_session(_db_url(args))

    try:
        if args.restore:
            found = ScheduleRepository.restore(session, args.schedule)
        else:
            found = ScheduleRepository.archive(session, args.schedule)
        if not found:
            raise ValueError(f"Schedule {args.schedule} not found")

        session.close()
        print(f"[OK] Schedule {args.schedule} {'restored' if args.restore else 'archived'}")

    except Exception as e:
        session.rollback()
        session.close()
        print(f"[ERROR] Archive failed: {e}")
        raise


def _add_schedule_selector(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--schedule", help="Schedule ID")
    parser.add_argument("--branch", help="Branch ID (with --week)")
    parser.add_argument("--week", help="Any date in the week, e.g. 2025-06-02")


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="smart-scheduler",
        description="Weekly shift scheduling for multi-branch businesses",
    )

    # Global options
    parser.add_argument("--db", help="Database URL (default: from config, else sqlite:///scheduler.db)")

    sub = parser.add_subparsers(dest="command", required=True)

    # init-db command
    init = sub.add_parser("init-db", help="Initialize database")
    init.add_argument("--reset", action="store_true", help="Drop and recreate all tables (deletes all data)")
    init.set_defaults(func=_cmd_init_db)

    # import-csv command
    imp = sub.add_parser("import-csv", help="Import CSV data into database")
    imp.add_argument("--branches", help="Path to branches CSV")
    imp.add_argument("--workers", help="Path to workers CSV")
    imp.add_argument("--templates", help="Path to shift templates CSV")
    imp.add_argument("--availability", help="Path to availability CSV")
    imp.add_argument("--time-off", dest="time_off", help="Path to time off CSV")
    imp.add_argument("--restrictions", help="Path to worker restrictions CSV")
    imp.set_defaults(func=_cmd_import_csv)

    # generate command
    gen = sub.add_parser("generate", help="Generate schedule for a week")
    gen.add_argument("--branch", required=True, help="Branch ID")
    gen.add_argument("--week", required=True, help="Any date in the week, e.g. 2025-06-02")
    gen.add_argument("--templates", help="Comma-separated template IDs (default: all)")
    gen.add_argument("--config", help="Path to config YAML or JSON")
    gen.add_argument("--out", help="Optional: export schedule to CSV")
    gen.add_argument("--replace", action="store_true", help="Replace the week's existing schedule")
    gen.set_defaults(func=_cmd_generate)

    # export command
    exp = sub.add_parser("export", help="Export data from database to CSV")
    _add_schedule_selector(exp)
    exp.add_argument("--out", help="Path to export schedule CSV")
    exp.add_argument("--workers", help="Path to export workers CSV")
    exp.set_defaults(func=_cmd_export)

    # validate command
    val = sub.add_parser("validate", help="Validate a stored schedule")
    _add_schedule_selector(val)
    val.add_argument("--config", help="Path to config YAML or JSON")
    val.set_defaults(func=_cmd_validate)

    # summarize command
    summ = sub.add_parser("summarize", help="Print a coverage report")
    _add_schedule_selector(summ)
    summ.set_defaults(func=_cmd_summarize)

    # archive command
    arc = sub.add_parser("archive", help="Archive or restore a schedule")
    arc.add_argument("--schedule", required=True, help="Schedule ID")
    arc.add_argument("--restore", action="store_true", help="Un-archive instead")
    arc.set_defaults(func=_cmd_archive)

    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
