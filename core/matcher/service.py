#!/usr/bin/env python3
"""
Match Service - runs the orchestrator against the repository.

Pipeline for one job:
1. Load the job and the worker pool (repository errors propagate)
2. Score the whole pool (MatchOrchestrator, pure, parallel)
3. Second pass: persist every match, then notify each one. Statuses are
   updated once all notifications have been attempted. Notification is
   best-effort; a failure is logged and the match stays PENDING.

match_jobs() runs that pipeline for several jobs; a job that cannot be
found is recorded on its batch and the rest still run.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
import logging
import threading

from core.availability.conflicts import ConflictDetail
from core.exceptions import RecordNotFoundError
from core.interfaces import MatchingRepository, MatchNotifier
from core.matcher.insights import JobInsights, build_job_insights
from core.matcher.orchestrator import MatchOrchestrator, WeightsArg
from core.scorer.models import MatchBatch, MatchResult, MatchStatus, WorkerProfile

logger = logging.getLogger(__name__)


class MatchService:
    """
    Application service wiring the engine to its collaborators.

    All collaborators are passed in; nothing here is a process-wide
    singleton.
    """

    def __init__(
        self,
        repo: MatchingRepository,
        orchestrator: MatchOrchestrator,
        notifier: Optional[MatchNotifier] = None,
        notify_min_score: Optional[float] = None
    ):
        self.repo = repo
        self.orchestrator = orchestrator
        self.notifier = notifier
        self.notify_min_score = notify_min_score

    def match_job(
        self,
        job_id: str,
        threshold: Optional[float] = None,
        worker_filter: Optional[Dict[str, Any]] = None,
        weights: WeightsArg = None,
        stop_event: Optional[threading.Event] = None,
        persist: bool = True
    ) -> MatchBatch:
        """Find, store and announce the workers matching a job.

        Args:
            job_id: Job to match
            threshold: Acceptance threshold (default from config)
            worker_filter: Passed through to the repository's pool query
            weights: Weight profile name, profile or mapping (default from config)
            stop_event: Cooperative cancellation for the scoring pass
            persist: If False, only score (no save, no notify)

        Returns:
            MatchBatch; matches reflect their final status after notification
        """
        job = self.repo.get_job(job_id)
        profile = self.orchestrator.resolve_profile(weights)

        if not job.is_active:
            logger.warning(f"Job {job_id} is {job.status}; not matching")
            return MatchBatch(
                job_id=job.id,
                threshold=self.orchestrator.default_threshold if threshold is None else threshold,
                weight_profile=profile.name,
            )

        pool = [self._with_availability(worker) for worker in self.repo.get_worker_pool(worker_filter)]
        logger.info(f"Matching job {job_id} against {len(pool)} workers")

        batch = self.orchestrator.run_batch(job, pool, threshold, profile, stop_event)

        if persist and batch.matches:
            batch.matches = self._persist_and_notify(batch.matches)
        return batch

    def match_jobs(
        self,
        job_ids: List[str],
        threshold: Optional[float] = None,
        worker_filter: Optional[Dict[str, Any]] = None,
        weights: WeightsArg = None,
        stop_event: Optional[threading.Event] = None,
        persist: bool = True
    ) -> Dict[str, MatchBatch]:
        """Run match_job for each job, keyed by job id in request order.

        A job that cannot be found yields an empty batch carrying the error;
        other jobs are still matched. Once stop_event is set, remaining jobs
        get a cancelled empty batch.
        """
        results: Dict[str, MatchBatch] = {}
        for job_id in dict.fromkeys(job_ids):
            if stop_event is not None and stop_event.is_set():
                results[job_id] = MatchBatch(job_id=job_id, cancelled=True)
                continue
            try:
                results[job_id] = self.match_job(
                    job_id,
                    threshold=threshold,
                    worker_filter=worker_filter,
                    weights=weights,
                    stop_event=stop_event,
                    persist=persist
                )
            except RecordNotFoundError as e:
                logger.warning(f"Skipping job {job_id}: {e}")
                results[job_id] = MatchBatch(job_id=job_id, error=str(e))

        matched = sum(len(b.matches) for b in results.values())
        logger.info(f"Batch of {len(results)} jobs produced {matched} matches")
        return results

    def match_worker(
        self,
        worker_id: str,
        threshold: Optional[float] = None,
        weights: WeightsArg = None
    ) -> List[MatchResult]:
        """Active jobs a worker qualifies for, best first. Nothing is persisted."""
        worker = self.repo.get_worker(worker_id)
        jobs = self.repo.get_active_jobs()
        results = self.orchestrator.rank_jobs(worker, jobs, threshold, weights)
        logger.info(f"Worker {worker_id}: {len(results)} of {len(jobs)} active jobs match")
        return results

    def job_insights(self, job_id: str) -> JobInsights:
        job = self.repo.get_job(job_id)
        results = self.repo.get_matches_for_job(job_id)

        workers = []
        for result in results:
            try:
                workers.append(self.repo.get_worker(result.worker_id))
            except RecordNotFoundError:
                logger.warning(f"Match {job_id}/{result.worker_id} refers to a missing worker")

        return build_job_insights(job, results, workers, self.orchestrator.checker)

    def check_conflicts(
        self,
        worker_id: str,
        proposed_start: datetime,
        proposed_end: datetime
    ) -> List[ConflictDetail]:
        """Entries blocking a proposed commitment for one worker."""
        entries = self.repo.get_availability(worker_id)
        return self.orchestrator.checker.find_conflicts(entries, proposed_start, proposed_end)

    def _with_availability(self, worker: WorkerProfile) -> WorkerProfile:
        return worker.with_availability(self.repo.get_availability(worker.id))

    def _persist_and_notify(self, matches: List[MatchResult]) -> List[MatchResult]:
        for match in matches:
            self.repo.save_match(match)

        if self.notifier is None:
            return matches

        delivered = set()
        for match in matches:
            if self._wants_notification(match) and self._safe_notify(match):
                delivered.add((match.job_id, match.worker_id))

        final = []
        for match in matches:
            if (match.job_id, match.worker_id) in delivered:
                match = match.mark_notified()
                self.repo.update_match_status(match.job_id, match.worker_id, MatchStatus.NOTIFIED)
            final.append(match)

        logger.info(f"Saved {len(matches)} matches, notified {len(delivered)}")
        return final

    def _wants_notification(self, match: MatchResult) -> bool:
        # optional extra bar on top of the match threshold; off by default
        return self.notify_min_score is None or match.aggregate_score >= self.notify_min_score

    def _safe_notify(self, match: MatchResult) -> bool:
        try:
            return bool(self.notifier.notify(match.worker_id, match.job_id, match.aggregate_score))
        except Exception as e:
            logger.error(f"Notification failed for {match.job_id}/{match.worker_id}: {e}")
            return False
