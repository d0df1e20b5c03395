"""End-to-end tests for the command-line interface."""

import pandas as pd
import pytest

from smart_scheduler.cli import main
from smart_scheduler.domain.repositories import ScheduleConflictError


@pytest.fixture
def csv_dir(tmp_path):
    (tmp_path / "branches.csv").write_text(
        "branch_id,name,day,start,end,is_open\n"
        "b1,Downtown,monday,09:00,17:00,true\n"
    )
    (tmp_path / "workers.csv").write_text(
        "id,branch_id,name,email,role,job_title,rating:Customer Service\n"
        "w1,b1,Ana,,Staff,,4\n"
    )
    (tmp_path / "templates.csv").write_text(
        "id,branch_id,name,start_time,end_time,required_workers,priority,days,job_title_requirements\n"
        "am,b1,Morning,09:00,13:00,1,1,monday,\n"
    )
    (tmp_path / "availability.csv").write_text(
        "worker_id,week_start_date,day,available,shifts,status,submitted_at\n"
        "w1,2025-06-02,monday,true,am,approved,2025-05-20T10:00:00Z\n"
    )
    return tmp_path


@pytest.mark.integration
def test_full_workflow(csv_dir, capsys):
    """init-db, import, generate, summarize, export and archive."""
    db = ["--db", f"sqlite:///{csv_dir / 'cli.db'}"]

    main(db + ["init-db"])
    main(db + [
        "import-csv",
        "--branches", str(csv_dir / "branches.csv"),
        "--workers", str(csv_dir / "workers.csv"),
        "--templates", str(csv_dir / "templates.csv"),
        "--availability", str(csv_dir / "availability.csv"),
    ])
    main(db + ["generate", "--branch", "b1", "--week", "2025-06-02", "--out", str(csv_dir / "out.csv")])

    out = capsys.readouterr().out
    assert "[OK] CSV import complete" in out
    assert "[OK] Generated schedule" in out

    exported = pd.read_csv(csv_dir / "out.csv", dtype=str, keep_default_na=False)
    assert list(exported["worker_id"]) == ["w1"]
    schedule_id = exported.loc[0, "schedule_id"]

    main(db + ["validate", "--branch", "b1", "--week", "2025-06-04"])
    main(db + ["summarize", "--schedule", schedule_id])
    out = capsys.readouterr().out
    assert "[OK] Validation passed" in out
    assert "All shifts fully staffed." in out

    with pytest.raises(ScheduleConflictError):
        main(db + ["generate", "--branch", "b1", "--week", "2025-06-02"])
    assert "[ERROR] Generation failed" in capsys.readouterr().out

    main(db + ["archive", "--schedule", schedule_id])
    main(db + ["generate", "--branch", "b1", "--week", "2025-06-02"])
    assert "archived" in capsys.readouterr().out


def test_missing_schedule_reports_error(tmp_path, capsys):
    """Unknown schedules fail with an [ERROR] line."""
    db = ["--db", f"sqlite:///{tmp_path / 'empty.db'}"]
    main(db + ["init-db"])
    with pytest.raises(ValueError):
        main(db + ["summarize", "--schedule", "nope"])
    assert "[ERROR] Summary failed" in capsys.readouterr().out


def test_init_db_reset_drops_data(csv_dir, capsys):
    """--reset recreates the tables empty."""
    db = ["--db", f"sqlite:///{csv_dir / 'reset.db'}"]
    main(db + ["init-db"])
    main(db + ["import-csv", "--branches", str(csv_dir / "branches.csv")])

    main(db + ["init-db", "--reset"])
    assert "[WARN] Database reset" in capsys.readouterr().out

    with pytest.raises(ValueError):
        main(db + ["generate", "--branch", "b1", "--week", "2025-06-02"])
    assert "[ERROR] Generation failed" in capsys.readouterr().out
