"""Smart shift scheduler: weekly rosters for multi-branch businesses.

Modules:
- config: scheduler configuration and preference defaults (JSON or YAML)
- domain: SQLAlchemy models, repositories and the scheduling context loader
- services: availability, eligibility, scoring, restrictions and validation
- engine: worker selection, weekly orchestration and manual reassignment
- io: CSV import/export
- validator: coverage reports for generated schedules
- cli: command-line interface entrypoints
"""

__all__ = [
    "config",
    "domain",
    "services",
    "engine",
    "io",
    "validator",
    "cli",
]
