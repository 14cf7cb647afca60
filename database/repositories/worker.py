import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from core.exceptions import WorkerNotFoundError
from core.geo import Coordinate
from core.scorer.models import SalaryExpectation, WorkerProfile
from database.models import WorkerRecord
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def profile_from_row(row: WorkerRecord) -> WorkerProfile:
    """Snapshot without availability; callers attach it separately."""
    location = None
    if row.latitude is not None and row.longitude is not None:
        location = Coordinate(row.latitude, row.longitude)

    salary = None
    if row.salary_expected is not None:
        salary = SalaryExpectation(amount=row.salary_expected, currency=row.salary_currency)

    return WorkerProfile(
        id=row.id,
        name=row.name,
        skills=list(row.skills or []),
        experience_years=row.experience_years,
        preferred_location=location,
        salary_expectation=salary,
    )


class WorkerRepository(BaseRepository):
    def get_by_id(self, worker_id: str) -> WorkerProfile:
        row = self.db.get(WorkerRecord, worker_id)
        if row is None:
            raise WorkerNotFoundError(f"Worker with id {worker_id} not found")
        return profile_from_row(row)

    def get_pool(self, worker_filter: Optional[Dict[str, Any]] = None) -> List[WorkerProfile]:
        """Active workers, optionally narrowed.

        Filter keys:
            worker_ids: only these workers
            skills: workers holding at least one of these skills (case-insensitive)
            include_inactive: also return inactive workers
        """
        worker_filter = worker_filter or {}
        stmt = select(WorkerRecord)
        if not worker_filter.get('include_inactive'):
            stmt = stmt.where(WorkerRecord.status == 'active')
        if worker_filter.get('worker_ids'):
            stmt = stmt.where(WorkerRecord.id.in_(list(worker_filter['worker_ids'])))
        stmt = stmt.order_by(WorkerRecord.id)

        rows = self.db.execute(stmt).scalars().all()

        # JSON containment differs per backend; skill filtering happens here
        wanted = {s.casefold() for s in worker_filter.get('skills') or []}
        if wanted:
            rows = [r for r in rows if wanted & {s.casefold() for s in r.skills or []}]

        return [profile_from_row(row) for row in rows]

    def upsert(self, profile: WorkerProfile, status: str = 'active') -> WorkerRecord:
        row = self._get_or_add(WorkerRecord, profile.id, id=profile.id)
        row.name = profile.name
        row.skills = list(profile.skills)
        row.experience_years = profile.experience_years
        row.latitude = profile.preferred_location.latitude if profile.preferred_location else None
        row.longitude = profile.preferred_location.longitude if profile.preferred_location else None
        row.salary_expected = profile.salary_expectation.amount if profile.salary_expectation else None
        row.salary_currency = profile.salary_expectation.currency if profile.salary_expectation else None
        row.status = status
        self.db.flush()
        return row
