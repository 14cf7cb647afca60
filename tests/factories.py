"""
Builders for scoring inputs.

Dates are anchored on MONDAY (2025-06-02) so weekday arithmetic in tests
is easy to follow.
"""

from datetime import date, datetime, timedelta

from core.availability.models import (
    Availability,
    AvailabilityType,
    RecurrencePattern,
    RecurrenceRule,
)
from core.geo import Coordinate
from core.scorer.models import JobPosting, SalaryExpectation, SalaryRange, WorkerProfile

MONDAY = date(2025, 6, 2)

# Central Tokyo and a point roughly 1.5 km away
TOKYO = Coordinate(35.6812, 139.7671)
NEAR_TOKYO = Coordinate(35.6895, 139.7794)
OSAKA = Coordinate(34.6937, 135.5023)


def make_job(job_id="job-1", **overrides) -> JobPosting:
    fields = dict(
        id=job_id,
        title="Warehouse Lead",
        required_skills=["forklift", "inventory"],
        required_experience_years=3.0,
        location=TOKYO,
        salary=SalaryRange(min=80, max=100, currency="USD"),
        schedule_start=datetime.combine(MONDAY, datetime.min.time()).replace(hour=9),
        schedule_end=datetime.combine(MONDAY, datetime.min.time()).replace(hour=17),
    )
    fields.update(overrides)
    return JobPosting(**fields)


def available_on(worker_id: str, day: date = MONDAY, days: int = 0, **overrides) -> Availability:
    fields = dict(
        worker_id=worker_id,
        type=AvailabilityType.AVAILABLE,
        start_date=day,
        end_date=day + timedelta(days=days),
    )
    fields.update(overrides)
    return Availability(**fields)


def unavailable_on(worker_id: str, day: date = MONDAY, days: int = 0, **overrides) -> Availability:
    return available_on(worker_id, day, days, type=AvailabilityType.UNAVAILABLE, **overrides)


def weekly_rule(days_of_week, start: date = MONDAY, **overrides) -> RecurrenceRule:
    fields = dict(
        pattern=RecurrencePattern.WEEKLY,
        start_date=start,
        days_of_week=frozenset(days_of_week),
        end_date=start + timedelta(weeks=12),
    )
    fields.update(overrides)
    return RecurrenceRule(**fields)


def make_worker(worker_id="worker-1", availability=None, **overrides) -> WorkerProfile:
    fields = dict(
        id=worker_id,
        name="Aiko",
        skills=["Forklift", "Inventory"],
        experience_years=5.0,
        preferred_location=NEAR_TOKYO,
        salary_expectation=SalaryExpectation(amount=95, currency="USD"),
        availability=[available_on(worker_id)] if availability is None else list(availability),
    )
    fields.update(overrides)
    return WorkerProfile(**fields)
