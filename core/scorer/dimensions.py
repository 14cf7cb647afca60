#!/usr/bin/env python3
"""
Dimension Scorers - independent compatibility measures in [0, 1].

Every function here is pure. Partial profiles are expected, so missing
data never raises; it resolves to the documented zero/neutral score:

- skill:        |worker & job| / |job|, 0 when the job lists no skills
- experience:   min(worker / required, 1), 1 when nothing is required
- salary:       1 - relative gap to the job maximum / tolerance
- location:     1 - distance / radius, 0 on unknown coordinates
- availability: 1 only with no blocker and a declared free window
"""

from typing import Iterable, Optional
import logging
import math

from core.availability.conflicts import AvailabilityConflictChecker
from core.config_loader import ScorerConfig
from core.geo import distance_km
from core.scorer.models import (
    DimensionScores,
    JobPosting,
    SalaryExpectation,
    SalaryRange,
    WorkerProfile,
)
from core.scorer.weights import AVAILABILITY, EXPERIENCE, LOCATION, SALARY, SKILL

logger = logging.getLogger(__name__)

_default_checker = AvailabilityConflictChecker()


def _clamp01(x: float) -> float:
    return max(0.0, min(1.0, x))


def _positive(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def normalize_skill(skill: str) -> str:
    return " ".join(str(skill).split()).casefold()


def normalize_skills(skills: Iterable[str]) -> set:
    return {normalize_skill(s) for s in (skills or []) if s and str(s).strip()}


def skill_score(worker_skills: Iterable[str], job_skills: Iterable[str]) -> float:
    required = normalize_skills(job_skills)
    if not required:
        return 0.0
    return len(normalize_skills(worker_skills) & required) / len(required)


def experience_score(worker_years: Optional[float], required_years: Optional[float]) -> float:
    required = _positive(required_years)
    if required is None:
        return 1.0
    if worker_years is None or isinstance(worker_years, bool):
        return 0.0
    try:
        years = max(0.0, float(worker_years))
    except (TypeError, ValueError):
        return 0.0
    return _clamp01(years / required)


def salary_score(
    expectation: Optional[SalaryExpectation],
    offered: Optional[SalaryRange],
    max_diff_percent: float = 20.0
) -> float:
    if expectation is None or offered is None:
        return 0.0
    expected = _positive(expectation.amount)
    job_max = _positive(offered.max)
    tolerance = _positive(max_diff_percent)
    if expected is None or job_max is None or tolerance is None:
        return 0.0

    if expectation.currency and offered.currency and \
            expectation.currency.upper() != offered.currency.upper():
        logger.debug(f"Salary currency mismatch: {expectation.currency} vs {offered.currency}")
        return 0.0

    relative_gap = abs(expected - job_max) / job_max
    return _clamp01(1.0 - relative_gap / (tolerance / 100.0))


def location_score(worker_location, job_location, max_distance_km: float = 50.0) -> float:
    radius = _positive(max_distance_km)
    if radius is None:
        return 0.0
    distance = distance_km(worker_location, job_location)
    if math.isinf(distance):
        return 0.0
    return _clamp01(1.0 - distance / radius)


def availability_score(
    worker: WorkerProfile,
    job: JobPosting,
    checker: Optional[AvailabilityConflictChecker] = None
) -> float:
    """Binary: availability is a hard constraint, not a soft preference."""
    window = job.schedule_window()
    if window is None:
        logger.debug(f"Job {job.id} has no schedule window; availability scores 0")
        return 0.0

    checker = checker or _default_checker
    start, end = window
    if checker.has_conflict(worker.availability, start, end):
        return 0.0
    if not checker.has_declared_availability(worker.availability, start, end):
        return 0.0
    return 1.0


def score_dimensions(
    job: JobPosting,
    worker: WorkerProfile,
    config: ScorerConfig,
    dimensions: Iterable[str],
    checker: Optional[AvailabilityConflictChecker] = None
) -> DimensionScores:
    """Score only the requested dimensions; the rest stay at 0.0."""
    wanted = set(dimensions)
    scores = {}
    if SKILL in wanted:
        scores[SKILL] = skill_score(worker.skills, job.required_skills)
    if EXPERIENCE in wanted:
        scores[EXPERIENCE] = experience_score(worker.experience_years, job.required_experience_years)
    if LOCATION in wanted:
        scores[LOCATION] = location_score(worker.preferred_location, job.location, config.max_distance_km)
    if SALARY in wanted:
        scores[SALARY] = salary_score(worker.salary_expectation, job.salary, config.max_salary_diff_percent)
    if AVAILABILITY in wanted:
        scores[AVAILABILITY] = availability_score(worker, job, checker)
    return DimensionScores(**scores)
