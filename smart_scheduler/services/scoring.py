"""Scoring of a worker's suitability for a shift template."""

from __future__ import annotations

from typing import Iterable, Optional

from smart_scheduler.config import SchedulingPreferences, ScoringWeights
from smart_scheduler.domain.models import ShiftTemplate, Worker

SENIOR_ROLE_KEYWORDS = ("Manager", "Supervisor", "Team Lead", "Senior")
SKILL_CRITERIA = ("Customer Service", "Technical Skills", "Leadership")

DEFAULT_WEIGHTS = ScoringWeights()


def average_rating(worker: Worker, rating_criteria: Optional[Iterable[str]] = None) -> float:
    """
    Mean of a worker's ratings.

    With ``rating_criteria`` the mean runs over exactly those criteria, counting
    the ones the worker has no rating for as 0.
    """
    ratings = worker.ratings or {}
    if rating_criteria is not None:
        values = [float(ratings.get(criterion) or 0) for criterion in rating_criteria]
    else:
        values = [float(v or 0) for v in ratings.values()]
    if not values:
        return 0.0
    return sum(values) / len(values)


def is_senior_role(role: str | None) -> bool:
    return any(keyword in (role or "") for keyword in SENIOR_ROLE_KEYWORDS)


def calculate_worker_score(
    worker: Worker,
    template: ShiftTemplate,
    preferences: SchedulingPreferences,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    rating_criteria: Optional[Iterable[str]] = None,
) -> float:
    """
    Calculate how well a worker suits a shift. Higher is better, never negative.

    Args:
        worker: Worker to score
        template: Shift template being filled
        preferences: Scheduling preferences (experience and skill toggles)
        weights: Linear weights for each component
        rating_criteria: Branch rating criteria used for the rating mean

    Returns:
        Score >= 0
    """
    avg = average_rating(worker, rating_criteria)
    score = avg * weights.rating_multiplier

    requirements = template.job_title_requirements or {}
    if worker.job_title and requirements.get(worker.job_title):
        score += weights.job_title_match

    if preferences.prefer_experienced_workers and avg >= weights.experience_min_rating:
        score += weights.experience_bonus

    if is_senior_role(worker.role):
        score += weights.senior_role_bonus
        if (template.priority or 1) > 1:
            score += weights.priority_bonus

    if preferences.prioritize_skill_match:
        ratings = worker.ratings or {}
        matched = sum(1 for skill in SKILL_CRITERIA if float(ratings.get(skill) or 0) >= weights.skill_min_rating)
        score += matched * weights.skill_bonus

    return max(0.0, score)
