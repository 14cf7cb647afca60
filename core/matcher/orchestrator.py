#!/usr/bin/env python3
"""
Match Orchestrator - weighted job/worker scoring over a worker pool.

Combines the dimension scores into one aggregate per (job, worker) pair
using an explicitly selected weight profile, applies the acceptance
threshold, and ranks the survivors.

Scoring is pure and runs on a thread pool. Persistence and notification
are not done here; MatchService does them in a second pass once the
whole batch has been scored.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable, List, Mapping, Optional, Union
import logging
import math
import os
import threading

from core.availability.conflicts import AvailabilityConflictChecker
from core.config_loader import MatchingConfig
from core.exceptions import InvalidThresholdError
from core.geo import distance_km
from core.scorer.dimensions import score_dimensions
from core.scorer.models import (
    JobPosting,
    MatchBatch,
    MatchResult,
    SkippedEvaluation,
    WorkerProfile,
)
from core.scorer.weights import (
    LOCATION,
    WeightProfile,
    get_profile,
    profile_from_weights,
    resolve_weight_profiles,
)

logger = logging.getLogger(__name__)

WeightsArg = Union[None, str, WeightProfile, Mapping[str, float]]

_CANCELLED = object()


def _validate_threshold(threshold: float) -> float:
    try:
        value = float(threshold)
    except (TypeError, ValueError):
        raise InvalidThresholdError(f"Threshold must be a number, got {threshold!r}") from None
    if not 0.0 <= value <= 1.0:
        raise InvalidThresholdError(f"Threshold must be within [0, 1], got {value}")
    return value


def _rank_key(result: MatchResult):
    return (-result.aggregate_score, str(result.worker_id))


class MatchOrchestrator:
    """
    Scores (job, worker) pairs and ranks worker pools for a job.

    Weight profiles are validated once, at construction; an invalid
    configured profile fails here rather than mid-batch.
    """

    def __init__(
        self,
        config: Optional[MatchingConfig] = None,
        checker: Optional[AvailabilityConflictChecker] = None,
        profiles: Optional[Mapping[str, WeightProfile]] = None
    ):
        self.config = config or MatchingConfig()
        self.checker = checker or AvailabilityConflictChecker()
        self.profiles = dict(profiles) if profiles is not None else resolve_weight_profiles(self.config)
        self.default_profile = get_profile(self.config.weight_profile, self.profiles)
        self.default_threshold = _validate_threshold(self.config.threshold)
        self.max_workers = self.config.max_workers or os.cpu_count() or 1

    def resolve_profile(self, weights: WeightsArg = None) -> WeightProfile:
        """Accept a profile name, a WeightProfile, a raw weight mapping, or None for the default."""
        if weights is None:
            return self.default_profile
        if isinstance(weights, WeightProfile):
            return weights
        if isinstance(weights, str):
            return get_profile(weights, self.profiles)
        return profile_from_weights(weights)

    def score_match(
        self,
        job: JobPosting,
        worker: WorkerProfile,
        weights: WeightsArg = None
    ) -> MatchResult:
        """Aggregate score for one pair.

        The aggregate is the weighted sum of the profile's dimensions,
        clamped to [0, 1]. A hard-gated dimension scoring 0 forces it to 0.
        """
        profile = self.resolve_profile(weights)
        scores = score_dimensions(job, worker, self.config.scorer, profile.dimensions, self.checker)

        aggregate = sum(weight * scores.get(dim) for dim, weight in profile.weights.items())
        gated_by = frozenset(dim for dim in profile.hard_gates if scores.get(dim) <= 0.0)
        if gated_by:
            aggregate = 0.0
        aggregate = max(0.0, min(1.0, aggregate))

        details = {}
        if profile.uses(LOCATION):
            distance = distance_km(worker.preferred_location, job.location)
            details['distance_km'] = None if math.isinf(distance) else round(distance, 3)

        logger.debug(
            f"Job {job.id} / worker {worker.id}: aggregate={aggregate:.3f} "
            f"({profile.name}) {scores.as_dict()}"
            + (f" gated_by={sorted(gated_by)}" if gated_by else "")
        )

        return MatchResult(
            job_id=job.id,
            worker_id=worker.id,
            aggregate_score=aggregate,
            breakdown=scores,
            weight_profile=profile.name,
            gated_by=gated_by,
            details=details,
        )

    def run_batch(
        self,
        job: JobPosting,
        worker_pool: Iterable[WorkerProfile],
        threshold: Optional[float] = None,
        weights: WeightsArg = None,
        stop_event: Optional[threading.Event] = None
    ) -> MatchBatch:
        """Score every worker independently and keep those at or above threshold.

        A worker whose evaluation raises is recorded in `skipped` and the
        batch carries on. Setting stop_event abandons the remaining workers;
        it is checked once before each evaluation.

        Returns:
            MatchBatch with matches sorted by aggregate score (highest
            first), ties broken by worker id
        """
        profile = self.resolve_profile(weights)
        threshold = self.default_threshold if threshold is None else _validate_threshold(threshold)
        if stop_event is None:
            stop_event = threading.Event()

        workers = list(worker_pool)
        batch = MatchBatch(job_id=job.id, threshold=threshold, weight_profile=profile.name)
        if not workers:
            logger.info(f"Job {job.id}: empty worker pool")
            return batch

        def _evaluate(worker: WorkerProfile):
            if stop_event.is_set():
                return _CANCELLED
            try:
                return self.score_match(job, worker, profile)
            except Exception as e:
                worker_id = str(getattr(worker, 'id', '<unknown>'))
                logger.warning(f"Skipping worker {worker_id} for job {job.id}: {e}")
                return SkippedEvaluation(worker_id=worker_id, error=str(e), error_type=type(e).__name__)

        results: List[MatchResult] = []
        pool_size = max(1, min(self.max_workers, len(workers)))
        with ThreadPoolExecutor(max_workers=pool_size) as pool:
            futures = [pool.submit(_evaluate, worker) for worker in workers]
            for future in as_completed(futures):
                outcome = future.result()
                if outcome is _CANCELLED:
                    batch.cancelled = True
                elif isinstance(outcome, SkippedEvaluation):
                    batch.evaluated += 1
                    batch.skipped.append(outcome)
                else:
                    batch.evaluated += 1
                    results.append(outcome)

        batch.matches = sorted(
            (r for r in results if r.aggregate_score >= threshold),
            key=_rank_key
        )
        batch.skipped.sort(key=lambda s: s.worker_id)

        logger.info(
            f"Job {job.id}: evaluated {batch.evaluated}/{len(workers)} workers, "
            f"{len(batch.matches)} at or above {threshold:.2f} ({profile.name}), "
            f"{len(batch.skipped)} skipped" + (", cancelled" if batch.cancelled else "")
        )
        return batch

    def find_matches(
        self,
        job: JobPosting,
        worker_pool: Iterable[WorkerProfile],
        threshold: Optional[float] = None,
        weights: WeightsArg = None,
        stop_event: Optional[threading.Event] = None
    ) -> List[MatchResult]:
        """Ranked matches for a job; see run_batch."""
        return self.run_batch(job, worker_pool, threshold, weights, stop_event).matches

    def rank_jobs(
        self,
        worker: WorkerProfile,
        jobs: Iterable[JobPosting],
        threshold: Optional[float] = None,
        weights: WeightsArg = None
    ) -> List[MatchResult]:
        """Reverse direction: jobs a worker qualifies for, best first.

        Closed jobs are ignored; a job whose evaluation raises is logged
        and left out.
        """
        profile = self.resolve_profile(weights)
        threshold = self.default_threshold if threshold is None else _validate_threshold(threshold)

        results = []
        for job in jobs:
            if not job.is_active:
                continue
            try:
                result = self.score_match(job, worker, profile)
            except Exception as e:
                logger.warning(f"Skipping job {job.id} for worker {worker.id}: {e}")
                continue
            if result.aggregate_score >= threshold:
                results.append(result)

        results.sort(key=lambda r: (-r.aggregate_score, str(r.job_id)))
        return results
