import logging
from typing import List

from sqlalchemy import select

from core.exceptions import JobNotFoundError
from core.geo import Coordinate
from core.scorer.models import JobPosting, JobStatus, SalaryRange
from database.models import JobRecord
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def posting_from_row(row: JobRecord) -> JobPosting:
    location = None
    if row.latitude is not None and row.longitude is not None:
        location = Coordinate(row.latitude, row.longitude)

    salary = None
    if row.salary_min is not None or row.salary_max is not None:
        salary = SalaryRange(min=row.salary_min, max=row.salary_max, currency=row.salary_currency)

    return JobPosting(
        id=row.id,
        title=row.title,
        required_skills=list(row.required_skills or []),
        required_experience_years=row.required_experience_years or 0.0,
        location=location,
        salary=salary,
        status=JobStatus(row.status),
        schedule_start=row.schedule_start,
        schedule_end=row.schedule_end,
    )


class JobRepository(BaseRepository):
    def get_by_id(self, job_id: str) -> JobPosting:
        row = self.db.get(JobRecord, job_id)
        if row is None:
            raise JobNotFoundError(f"Job with id {job_id} not found")
        return posting_from_row(row)

    def get_active(self) -> List[JobPosting]:
        stmt = select(JobRecord).where(JobRecord.status == JobStatus.ACTIVE.value).order_by(JobRecord.id)
        return [posting_from_row(row) for row in self.db.execute(stmt).scalars().all()]

    def upsert(self, posting: JobPosting) -> JobRecord:
        row = self._get_or_add(JobRecord, posting.id, id=posting.id)
        row.title = posting.title
        row.required_skills = list(posting.required_skills)
        row.required_experience_years = posting.required_experience_years
        row.latitude = posting.location.latitude if posting.location else None
        row.longitude = posting.location.longitude if posting.location else None
        row.salary_min = posting.salary.min if posting.salary else None
        row.salary_max = posting.salary.max if posting.salary else None
        row.salary_currency = posting.salary.currency if posting.salary else None
        row.status = JobStatus(posting.status).value
        row.schedule_start = posting.schedule_start
        row.schedule_end = posting.schedule_end
        self.db.flush()
        return row
