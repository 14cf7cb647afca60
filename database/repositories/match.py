import logging
from typing import List, Optional

from sqlalchemy import select

from core.scorer.models import DimensionScores, MatchResult, MatchStatus
from database.models import MatchRecord
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def result_from_row(row: MatchRecord) -> MatchResult:
    return MatchResult(
        job_id=row.job_id,
        worker_id=row.worker_id,
        aggregate_score=float(row.aggregate_score),
        breakdown=DimensionScores(
            skill=row.skill_score or 0.0,
            experience=row.experience_score or 0.0,
            location=row.location_score or 0.0,
            salary=row.salary_score or 0.0,
            availability=row.availability_score or 0.0,
        ),
        status=MatchStatus(row.status),
        weight_profile=row.weight_profile or "",
        gated_by=frozenset(row.gated_by or []),
        calculated_at=row.calculated_at,
        details=dict(row.details or {}),
    )


class MatchRepository(BaseRepository):
    def get_existing_match(self, job_id: str, worker_id: str) -> Optional[MatchRecord]:
        stmt = select(MatchRecord).where(
            MatchRecord.job_id == job_id,
            MatchRecord.worker_id == worker_id
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def save(self, result: MatchResult) -> MatchRecord:
        """Insert or overwrite the row for (job, worker)."""
        row = self.get_existing_match(result.job_id, result.worker_id)
        if row is None:
            row = MatchRecord(job_id=result.job_id, worker_id=result.worker_id)
            self.db.add(row)
        else:
            logger.debug(f"Overwriting match {result.job_id}/{result.worker_id}")

        row.aggregate_score = result.aggregate_score
        row.skill_score = result.breakdown.skill
        row.experience_score = result.breakdown.experience
        row.location_score = result.breakdown.location
        row.salary_score = result.breakdown.salary
        row.availability_score = result.breakdown.availability
        row.weight_profile = result.weight_profile
        row.gated_by = sorted(result.gated_by)
        row.details = dict(result.details)
        row.status = result.status.value
        row.calculated_at = result.calculated_at
        self.db.flush()
        return row

    def update_status(self, job_id: str, worker_id: str, status: MatchStatus) -> bool:
        row = self.get_existing_match(job_id, worker_id)
        if row is None:
            logger.warning(f"No stored match {job_id}/{worker_id} to mark {status.value}")
            return False
        row.status = status.value
        self.db.flush()
        return True

    def get_matches_for_job(
        self,
        job_id: str,
        min_score: Optional[float] = None,
        status: Optional[MatchStatus] = None
    ) -> List[MatchResult]:
        stmt = select(MatchRecord).where(MatchRecord.job_id == job_id)

        if min_score is not None:
            stmt = stmt.where(MatchRecord.aggregate_score >= min_score)
        if status is not None:
            stmt = stmt.where(MatchRecord.status == status.value)

        stmt = stmt.order_by(MatchRecord.aggregate_score.desc(), MatchRecord.worker_id)
        return [result_from_row(row) for row in self.db.execute(stmt).scalars().all()]

    def get_matches_for_worker(self, worker_id: str, min_score: Optional[float] = None) -> List[MatchResult]:
        stmt = select(MatchRecord).where(MatchRecord.worker_id == worker_id)
        if min_score is not None:
            stmt = stmt.where(MatchRecord.aggregate_score >= min_score)
        stmt = stmt.order_by(MatchRecord.aggregate_score.desc(), MatchRecord.job_id)
        return [result_from_row(row) for row in self.db.execute(stmt).scalars().all()]
