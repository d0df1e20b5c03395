"""Configuration loading for the scheduler (JSON, or YAML via PyYAML)."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Dict, List, Optional

import yaml


WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday"]


@dataclass
class SchedulingPreferences:
    """Branch-level scheduling preferences."""

    max_hours_per_week: float = 40
    max_consecutive_days: int = 5
    min_rest_hours: float = 8
    allow_overtime: bool = False
    overtime_threshold: float = 50
    prefer_experienced_workers: bool = True
    balance_workload: bool = True
    prioritize_skill_match: bool = True
    send_schedule_notifications: bool = True

    @property
    def hour_cap(self) -> float:
        """Weekly hour limit in effect for a single worker."""
        if self.allow_overtime:
            return float(self.overtime_threshold)
        return float(self.max_hours_per_week)

    def merged(self, overrides: Optional[Dict] = None) -> "SchedulingPreferences":
        """Return a copy with the non-null values of ``overrides`` applied."""
        if not overrides:
            return replace(self)
        _check_keys(overrides, SchedulingPreferences, "preferences")
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class ScoringWeights:
    """Linear weights used by the worker scoring function."""

    rating_multiplier: float = 20.0
    job_title_match: float = 25.0
    experience_bonus: float = 15.0
    experience_min_rating: float = 4.0
    senior_role_bonus: float = 10.0
    priority_bonus: float = 10.0
    skill_bonus: float = 5.0
    skill_min_rating: float = 4.0


@dataclass
class SchedulerConfig:
    database_url: str = "sqlite:///scheduler.db"
    legacy_availability_fallback: bool = False
    enforce_rest_rules: bool = False
    default_template_days: List[str] = field(default_factory=lambda: list(WEEKDAYS))
    preferences: SchedulingPreferences = field(default_factory=SchedulingPreferences)
    weights: ScoringWeights = field(default_factory=ScoringWeights)

    @classmethod
    def from_dict(cls, raw: Dict) -> "SchedulerConfig":
        raw = dict(raw or {})
        _check_keys(raw, cls, "config")
        prefs = SchedulingPreferences().merged(raw.pop("preferences", None))
        weights_raw = raw.pop("weights", None) or {}
        _check_keys(weights_raw, ScoringWeights, "weights")
        weights = ScoringWeights(**weights_raw)
        days = raw.pop("default_template_days", None)
        cfg = cls(preferences=prefs, weights=weights, **raw)
        if days is not None:
            cfg.default_template_days = [str(d).lower() for d in days]
        return cfg


def _check_keys(raw: Dict, cls, section: str) -> None:
    known = {f.name for f in fields(cls)}
    unknown = set(raw) - known
    if unknown:
        raise ValueError(f"Unknown {section} keys: {', '.join(sorted(unknown))}")


def load_config(path: str | Path | None = None) -> SchedulerConfig:
    """
    Load scheduler configuration.

    Args:
        path: JSON or YAML file. ``None`` returns the built-in defaults.

    Returns:
        SchedulerConfig
    """
    if path is None:
        return SchedulerConfig()

    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        raw = json.loads(text)
    else:
        raw = yaml.safe_load(text)

    if raw is not None and not isinstance(raw, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return SchedulerConfig.from_dict(raw or {})
