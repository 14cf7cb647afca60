#!/usr/bin/env python3
"""
Scoring Module - per-dimension compatibility scores and weight profiles.

Public API:
- JobPosting, WorkerProfile: read-only scoring inputs
- MatchResult, DimensionScores: scoring outputs
- WeightProfile, resolve_weight_profiles: validated weight sets

Split into focused modules:

- models.py: Data structures (inputs, MatchResult, MatchBatch)
- dimensions.py: Pure dimension scorers (skill, experience, salary, location, availability)
- weights.py: Named weight profiles and their validation
"""

from core.scorer.models import (
    DimensionScores,
    JobPosting,
    JobStatus,
    MatchBatch,
    MatchResult,
    MatchStatus,
    SalaryExpectation,
    SalaryRange,
    SkippedEvaluation,
    WorkerProfile,
)
from core.scorer.weights import (
    BUILTIN_PROFILES,
    FIVE_DIMENSION,
    FOUR_DIMENSION,
    WeightProfile,
    get_profile,
    resolve_weight_profiles,
)

__all__ = [
    'DimensionScores',
    'JobPosting',
    'JobStatus',
    'MatchBatch',
    'MatchResult',
    'MatchStatus',
    'SalaryExpectation',
    'SalaryRange',
    'SkippedEvaluation',
    'WorkerProfile',
    'BUILTIN_PROFILES',
    'FIVE_DIMENSION',
    'FOUR_DIMENSION',
    'WeightProfile',
    'get_profile',
    'resolve_weight_profiles',
]
