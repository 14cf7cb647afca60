"""
Matcher Module - weighted job/worker matching.

Public API:
- MatchOrchestrator: scoring and ranking (pure)
- MatchService: orchestrator + repository + notifier
- build_job_insights / JobInsights: candidate statistics for a job
"""

from core.matcher.orchestrator import MatchOrchestrator
from core.matcher.service import MatchService
from core.matcher.insights import JobInsights, SalaryStats, build_job_insights

__all__ = [
    'MatchOrchestrator',
    'MatchService',
    'JobInsights',
    'SalaryStats',
    'build_job_insights',
]
