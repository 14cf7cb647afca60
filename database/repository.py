import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from core.availability.models import Availability
from core.interfaces import MatchingRepository
from core.scorer.models import JobPosting, MatchResult, MatchStatus, WorkerProfile
from database.repositories import (
    AvailabilityRepository,
    JobRepository,
    MatchRepository,
    WorkerRepository,
)

logger = logging.getLogger(__name__)


class SqlMatchingRepository(MatchingRepository):
    """
    SQLAlchemy-backed MatchingRepository.

    Groups the per-table repositories behind the engine's collaborator
    interface so one Session serves a whole unit of work.
    """

    def __init__(self, db: Session, clock: Optional[Callable[[], datetime]] = None):
        self.db = db
        self.jobs = JobRepository(db)
        self.workers = WorkerRepository(db)
        self.availability = AvailabilityRepository(db, clock)
        self.matches = MatchRepository(db)

    def get_job(self, job_id: str) -> JobPosting:
        return self.jobs.get_by_id(job_id)

    def get_worker(self, worker_id: str) -> WorkerProfile:
        worker = self.workers.get_by_id(worker_id)
        return worker.with_availability(self.availability.get_for_worker(worker_id))

    def get_worker_pool(self, worker_filter: Optional[Dict[str, Any]] = None) -> List[WorkerProfile]:
        return self.workers.get_pool(worker_filter)

    def get_availability(self, worker_id: str) -> List[Availability]:
        return self.availability.get_for_worker(worker_id)

    def get_active_jobs(self) -> List[JobPosting]:
        return self.jobs.get_active()

    def save_match(self, result: MatchResult) -> None:
        self.matches.save(result)

    def update_match_status(self, job_id: str, worker_id: str, status: MatchStatus) -> None:
        self.matches.update_status(job_id, worker_id, status)

    def get_matches_for_job(self, job_id: str) -> List[MatchResult]:
        return self.matches.get_matches_for_job(job_id)

    def save_availability(self, entry: Availability) -> Availability:
        return self.availability.save(entry)

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
