"""
Collaborator Interfaces - what the matching engine consumes.

The engine never persists or sends anything itself; it talks to these
abstractions, injected through constructors.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from core.availability.models import Availability
from core.scorer.models import JobPosting, MatchResult, MatchStatus, WorkerProfile


class MatchingRepository(ABC):
    """
    Abstract source of jobs and workers, and sink for match results.
    """

    @abstractmethod
    def get_job(self, job_id: str) -> JobPosting:
        """
        Load a job posting.

        Raises:
            JobNotFoundError: no such job
        """
        pass

    @abstractmethod
    def get_worker(self, worker_id: str) -> WorkerProfile:
        """
        Load a worker profile with its availability entries.

        Raises:
            WorkerNotFoundError: no such worker
        """
        pass

    @abstractmethod
    def get_worker_pool(self, worker_filter: Optional[Dict[str, Any]] = None) -> List[WorkerProfile]:
        """
        Workers eligible for matching.

        Supported filter keys are implementation-defined; `skills` (any of)
        and `worker_ids` are understood by the SQL implementation.
        """
        pass

    @abstractmethod
    def get_availability(self, worker_id: str) -> List[Availability]:
        """All availability entries of a worker, expiry-refreshed."""
        pass

    @abstractmethod
    def get_active_jobs(self) -> List[JobPosting]:
        pass

    @abstractmethod
    def save_match(self, result: MatchResult) -> None:
        """
        Persist one match result. Dedup policy (job + worker) is the
        repository's responsibility.
        """
        pass

    @abstractmethod
    def update_match_status(self, job_id: str, worker_id: str, status: MatchStatus) -> None:
        pass

    @abstractmethod
    def get_matches_for_job(self, job_id: str) -> List[MatchResult]:
        pass


class MatchNotifier(ABC):
    """
    Abstract notification dispatcher. Fire-and-forget: implementations
    must not raise.
    """

    @abstractmethod
    def notify(self, worker_id: str, job_id: str, score: float) -> bool:
        """
        Tell a worker about a match.

        Returns:
            True if the notification was handed off successfully
        """
        pass
