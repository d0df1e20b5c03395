"""I/O utilities for CSV import/export."""

from .import_csv import (
    import_availability_csv,
    import_branches_csv,
    import_restrictions_csv,
    import_shift_templates_csv,
    import_time_off_csv,
    import_workers_csv,
)
from .export_csv import export_schedule_csv, export_workers_csv, schedule_frame

__all__ = [
    "import_availability_csv",
    "import_branches_csv",
    "import_restrictions_csv",
    "import_shift_templates_csv",
    "import_time_off_csv",
    "import_workers_csv",
    "export_schedule_csv",
    "export_workers_csv",
    "schedule_frame",
]
