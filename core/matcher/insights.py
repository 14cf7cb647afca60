#!/usr/bin/env python3
"""
Job Insights - summary statistics over the candidates matched to a job.

Reports:
- total candidates and average aggregate score
- skill gaps: required skills held by fewer than half the candidates
- salary range of candidates' positive expectations
- distance bands between candidates and the job site
- availability split: available / conflicted / undeclared
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
import logging
import math

import numpy as np

from core.availability.conflicts import AvailabilityConflictChecker
from core.geo import distance_km
from core.scorer.dimensions import normalize_skill, normalize_skills
from core.scorer.models import JobPosting, MatchResult, WorkerProfile

logger = logging.getLogger(__name__)

SKILL_GAP_RATIO = 0.5

# Upper bounds (km) of the distance bands; the last band is open
DISTANCE_BANDS = (10.0, 25.0, 50.0)


@dataclass
class SalaryStats:
    min: float
    max: float
    average: float


@dataclass
class JobInsights:
    job_id: str
    total_candidates: int = 0
    average_score: float = 0.0
    skill_gaps: List[str] = field(default_factory=list)
    salary_range: Optional[SalaryStats] = None
    distance_bands: Dict[str, int] = field(default_factory=dict)
    availability_stats: Dict[str, int] = field(default_factory=dict)


def _band_labels() -> List[str]:
    labels = []
    lower = 0.0
    for upper in DISTANCE_BANDS:
        labels.append(f"{lower:g}-{upper:g}km")
        lower = upper
    labels.append(f"{lower:g}km+")
    labels.append("unknown")
    return labels


def _band_for(distance: float) -> str:
    labels = _band_labels()
    if math.isinf(distance):
        return labels[-1]
    for label, upper in zip(labels, DISTANCE_BANDS):
        if distance < upper:
            return label
    return labels[-2]


def build_job_insights(
    job: JobPosting,
    results: Sequence[MatchResult],
    workers: Sequence[WorkerProfile],
    checker: Optional[AvailabilityConflictChecker] = None
) -> JobInsights:
    """Summarise the candidates of one job.

    Args:
        job: The job the results belong to
        results: Stored match results for the job
        workers: Profiles of the matched workers (missing ones are ignored)
        checker: Conflict checker for the availability split
    """
    checker = checker or AvailabilityConflictChecker()
    insights = JobInsights(job_id=job.id, total_candidates=len(results))

    if results:
        scores = np.array([r.aggregate_score for r in results], dtype=float)
        insights.average_score = float(scores.mean())

    by_id = {w.id: w for w in workers}
    candidates = [by_id[r.worker_id] for r in results if r.worker_id in by_id]
    if len(candidates) < len(results):
        logger.warning(f"Job {job.id}: {len(results) - len(candidates)} matched workers no longer exist")

    insights.skill_gaps = _skill_gaps(job, candidates)
    insights.salary_range = _salary_stats(candidates)

    bands = {label: 0 for label in _band_labels()}
    for worker in candidates:
        bands[_band_for(distance_km(worker.preferred_location, job.location))] += 1
    insights.distance_bands = bands

    insights.availability_stats = _availability_split(job, candidates, checker)
    return insights


def _skill_gaps(job: JobPosting, candidates: Sequence[WorkerProfile]) -> List[str]:
    held = [normalize_skills(w.skills) for w in candidates]
    gaps = []
    seen = set()
    for skill in job.required_skills:
        key = normalize_skill(skill)
        if not key or key in seen:
            continue
        seen.add(key)
        holders = sum(1 for skills in held if key in skills)
        if not candidates or holders < len(candidates) * SKILL_GAP_RATIO:
            gaps.append(skill)
    return gaps


def _salary_stats(candidates: Sequence[WorkerProfile]) -> Optional[SalaryStats]:
    amounts = [
        w.salary_expectation.amount
        for w in candidates
        if w.salary_expectation is not None
        and isinstance(w.salary_expectation.amount, (int, float))
        and not isinstance(w.salary_expectation.amount, bool)
        and w.salary_expectation.amount > 0
    ]
    if not amounts:
        return None
    values = np.array(amounts, dtype=float)
    return SalaryStats(min=float(values.min()), max=float(values.max()), average=float(values.mean()))


def _availability_split(
    job: JobPosting,
    candidates: Sequence[WorkerProfile],
    checker: AvailabilityConflictChecker
) -> Dict[str, int]:
    stats = {'available': 0, 'conflicted': 0, 'undeclared': 0}
    window = job.schedule_window()
    if window is None:
        stats['undeclared'] = len(candidates)
        return stats

    start, end = window
    for worker in candidates:
        try:
            if checker.has_conflict(worker.availability, start, end):
                stats['conflicted'] += 1
            elif checker.has_declared_availability(worker.availability, start, end):
                stats['available'] += 1
            else:
                stats['undeclared'] += 1
        except ValueError as e:
            logger.warning(f"Worker {worker.id}: availability not evaluable ({e})")
            stats['undeclared'] += 1
    return stats
