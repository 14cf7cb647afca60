#!/usr/bin/env python3
"""
Scoring Models - Data structures for scoring inputs and results.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from core.availability.models import Availability, DateLike
from core.exceptions import MatchStateError
from core.geo import Coordinate


class JobStatus(str, Enum):
    ACTIVE = "active"
    CLOSED = "closed"


class MatchStatus(str, Enum):
    PENDING = "PENDING"
    NOTIFIED = "NOTIFIED"


@dataclass(frozen=True)
class SalaryExpectation:
    amount: Optional[float]
    currency: Optional[str] = None


@dataclass(frozen=True)
class SalaryRange:
    min: Optional[float] = None
    max: Optional[float] = None
    currency: Optional[str] = None


@dataclass(frozen=True)
class WorkerProfile:
    """Read-only snapshot of a worker as seen by the matching engine."""
    id: str
    skills: List[str] = field(default_factory=list)
    experience_years: Optional[float] = None
    preferred_location: Optional[Coordinate] = None
    salary_expectation: Optional[SalaryExpectation] = None
    availability: List[Availability] = field(default_factory=list)
    name: Optional[str] = None

    def with_availability(self, availability: List[Availability]) -> "WorkerProfile":
        return replace(self, availability=list(availability))


@dataclass(frozen=True)
class JobPosting:
    """Read-only snapshot of a job posting.

    schedule_start/schedule_end is the commitment window checked against
    worker availability; an open-ended job is checked on its first day.
    """
    id: str
    required_skills: List[str] = field(default_factory=list)
    required_experience_years: float = 0.0
    location: Optional[Coordinate] = None
    salary: Optional[SalaryRange] = None
    status: JobStatus = JobStatus.ACTIVE
    schedule_start: Optional[DateLike] = None
    schedule_end: Optional[DateLike] = None
    title: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return JobStatus(self.status) == JobStatus.ACTIVE

    def schedule_window(self) -> Optional[Tuple[DateLike, DateLike]]:
        if self.schedule_start is None:
            return None
        return self.schedule_start, self.schedule_end or self.schedule_start


@dataclass(frozen=True)
class DimensionScores:
    """Per-dimension scores, each in [0, 1]."""
    skill: float = 0.0
    experience: float = 0.0
    location: float = 0.0
    salary: float = 0.0
    availability: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return {
            'skill': self.skill,
            'experience': self.experience,
            'location': self.location,
            'salary': self.salary,
            'availability': self.availability,
        }

    def get(self, dimension: str) -> float:
        return self.as_dict()[dimension]


@dataclass(frozen=True)
class MatchResult:
    """Scored (job, worker) pair.

    Never mutated except for the PENDING -> NOTIFIED transition, which
    returns a new instance.
    """
    job_id: str
    worker_id: str
    aggregate_score: float
    breakdown: DimensionScores
    status: MatchStatus = MatchStatus.PENDING
    weight_profile: str = ""
    gated_by: FrozenSet[str] = frozenset()
    calculated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    details: Dict[str, Any] = field(default_factory=dict)

    def mark_notified(self) -> "MatchResult":
        if self.status != MatchStatus.PENDING:
            raise MatchStateError(
                f"Cannot mark match {self.job_id}/{self.worker_id} notified from {self.status.value}"
            )
        return replace(self, status=MatchStatus.NOTIFIED)


@dataclass(frozen=True)
class SkippedEvaluation:
    """A worker whose evaluation failed inside a batch."""
    worker_id: str
    error: str
    error_type: str


@dataclass
class MatchBatch:
    """Outcome of scoring one job against a worker pool."""
    job_id: str
    matches: List[MatchResult] = field(default_factory=list)
    skipped: List[SkippedEvaluation] = field(default_factory=list)
    evaluated: int = 0
    cancelled: bool = False
    threshold: float = 0.0
    weight_profile: str = ""
    error: Optional[str] = None  # set when the job itself could not be matched
