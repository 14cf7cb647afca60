"""
Tests for the SQLAlchemy repositories against an in-memory SQLite database.
"""
import pytest
from dataclasses import replace
from datetime import date, datetime, timedelta

from core.availability.models import (
    Availability,
    AvailabilityStatus,
    AvailabilityType,
    DayOfWeek,
    RecurrencePattern,
    RecurrenceRule,
    TimeSlot,
)
from core.config_loader import MatchingConfig
from core.exceptions import JobNotFoundError, WorkerNotFoundError
from core.matcher.orchestrator import MatchOrchestrator
from core.matcher.service import MatchService
from core.scorer.models import JobStatus, MatchStatus
from database.models import AvailabilityRecord, JobRecord, MatchRecord, WorkerRecord
from database.repositories.availability import recurrence_from_json, recurrence_to_json
from database.repository import SqlMatchingRepository
from tests.factories import MONDAY, make_job, make_worker

pytestmark = pytest.mark.db


def day_before_monday() -> datetime:
    """Fixture availability covers the week of MONDAY; read it as of the day before."""
    return datetime(2025, 6, 1)


@pytest.fixture
def repo(db_session):
    repo = SqlMatchingRepository(db_session, clock=day_before_monday)
    repo.jobs.upsert(make_job("job-1"))
    repo.jobs.upsert(make_job("job-closed", status=JobStatus.CLOSED))
    for worker_id in ("w-1", "w-2"):
        repo.workers.upsert(make_worker(worker_id))
        repo.save_availability(Availability(
            worker_id=worker_id,
            type=AvailabilityType.AVAILABLE,
            start_date=MONDAY,
            end_date=MONDAY + timedelta(days=6),
        ))
    repo.workers.upsert(make_worker("w-inactive", skills=["welding"]), status='inactive')
    db_session.commit()
    return repo


class TestLookups:

    def test_get_job_round_trips_fields(self, repo):
        job = repo.get_job("job-1")
        expected = make_job("job-1")

        assert job.required_skills == expected.required_skills
        assert job.location == expected.location
        assert job.salary == expected.salary
        assert job.schedule_start == expected.schedule_start
        assert job.status == JobStatus.ACTIVE

    def test_missing_job(self, repo):
        with pytest.raises(JobNotFoundError):
            repo.get_job("nope")

    def test_missing_worker(self, repo):
        with pytest.raises(WorkerNotFoundError):
            repo.get_worker("nope")

    def test_get_worker_includes_availability(self, repo):
        worker = repo.get_worker("w-1")

        assert worker.skills == ["Forklift", "Inventory"]
        assert worker.salary_expectation.amount == 95
        assert len(worker.availability) == 1
        assert worker.availability[0].id is not None

    def test_active_jobs(self, repo):
        assert [j.id for j in repo.get_active_jobs()] == ["job-1"]

    def test_upsert_updates_in_place(self, repo, db_session):
        repo.jobs.upsert(make_job("job-1", title="Night Shift Lead", status=JobStatus.CLOSED))
        repo.workers.upsert(make_worker("w-1", skills=["welding"]))

        assert db_session.query(JobRecord).count() == 2
        assert db_session.query(WorkerRecord).count() == 3
        assert repo.get_job("job-1").title == "Night Shift Lead"
        assert repo.get_active_jobs() == []
        assert repo.get_worker("w-1").skills == ["welding"]


class TestWorkerPool:

    def test_only_active_workers(self, repo):
        assert [w.id for w in repo.get_worker_pool()] == ["w-1", "w-2"]

    def test_worker_ids_filter(self, repo):
        assert [w.id for w in repo.get_worker_pool({'worker_ids': ["w-2"]})] == ["w-2"]

    def test_skills_filter_is_case_insensitive(self, repo):
        assert [w.id for w in repo.get_worker_pool({'skills': ["FORKLIFT"]})] == ["w-1", "w-2"]
        assert repo.get_worker_pool({'skills': ["welding"]}) == []

    def test_include_inactive(self, repo):
        pool = repo.get_worker_pool({'skills': ["welding"], 'include_inactive': True})
        assert [w.id for w in pool] == ["w-inactive"]


class TestAvailabilityPersistence:

    def test_recurring_entry_round_trip(self, repo):
        rule = RecurrenceRule(
            RecurrencePattern.WEEKLY, MONDAY,
            days_of_week={DayOfWeek.MONDAY, DayOfWeek.THURSDAY},
            count=6, exceptions={MONDAY + timedelta(weeks=1)},
        )
        saved = repo.save_availability(Availability(
            worker_id="w-1",
            type=AvailabilityType.UNAVAILABLE,
            start_date=MONDAY,
            end_date=MONDAY + timedelta(weeks=4),
            is_all_day=False,
            time_slots=[TimeSlot("09:00", "12:00")],
            is_recurring=True,
            recurrence=rule,
            title="Night classes",
        ))

        loaded = repo.availability.get_by_id(saved.id)
        assert loaded.recurrence == rule
        assert loaded.time_slots == [TimeSlot("09:00", "12:00")]
        assert loaded.type == AvailabilityType.UNAVAILABLE
        assert loaded.title == "Night classes"

    def test_json_shape(self):
        rule = RecurrenceRule(RecurrencePattern.MONTHLY, date(2025, 1, 31), day_of_month=31,
                              end_date=date(2025, 12, 31))
        data = recurrence_to_json(rule)
        assert data['pattern'] == "MONTHLY"
        assert data['days_of_week'] == []
        assert data['end_date'] == "2025-12-31"
        assert recurrence_from_json(data) == rule
        assert recurrence_from_json(None) is None

    def test_lifecycle_update_is_saved(self, repo):
        entry = repo.get_availability("w-1")[0]
        repo.save_availability(entry.deactivate())

        assert repo.get_availability("w-1")[0].status == AvailabilityStatus.INACTIVE

    def test_passed_entries_expire_on_read(self, repo, db_session):
        past = repo.save_availability(Availability(
            worker_id="w-2", start_date=date(2020, 1, 1), end_date=date(2020, 1, 31),
        ))
        db_session.flush()

        entries = {e.id: e for e in repo.get_availability("w-2")}

        assert entries[past.id].status == AvailabilityStatus.EXPIRED
        assert db_session.get(AvailabilityRecord, past.id).status == 'EXPIRED'

    def test_expire_passed(self, repo):
        repo.save_availability(Availability(worker_id="w-1", start_date=date(2020, 1, 1),
                                            end_date=date(2020, 1, 2)))
        assert repo.availability.expire_passed(datetime(2025, 1, 1)) == 1
        assert repo.availability.expire_passed(datetime(2025, 1, 1)) == 0


class TestMatches:

    def _score(self, worker_id="w-1"):
        orchestrator = MatchOrchestrator(MatchingConfig())
        return orchestrator.score_match(make_job("job-1"), make_worker(worker_id))

    def test_save_and_read_back(self, repo):
        result = self._score()
        repo.save_match(result)

        stored = repo.get_matches_for_job("job-1")
        assert len(stored) == 1
        assert stored[0].aggregate_score == pytest.approx(result.aggregate_score)
        assert stored[0].breakdown.salary == pytest.approx(0.75)
        assert stored[0].weight_profile == "five_dimension"
        assert stored[0].status == MatchStatus.PENDING

    def test_one_row_per_job_and_worker(self, repo, db_session):
        repo.save_match(self._score())
        repo.save_match(self._score())

        assert db_session.query(MatchRecord).count() == 1

    def test_update_status(self, repo):
        repo.save_match(self._score())
        repo.update_match_status("job-1", "w-1", MatchStatus.NOTIFIED)

        assert repo.get_matches_for_job("job-1")[0].status == MatchStatus.NOTIFIED

    def test_update_status_of_unknown_match_is_a_no_op(self, repo):
        assert repo.matches.update_status("job-1", "w-2", MatchStatus.NOTIFIED) is False

    def test_matches_ordered_by_score(self, repo):
        low = self._score("w-2")
        repo.save_match(self._score("w-1"))
        repo.save_match(replace(low, aggregate_score=0.1))

        assert [m.worker_id for m in repo.get_matches_for_job("job-1")] == ["w-1", "w-2"]
        assert [m.worker_id for m in repo.matches.get_matches_for_job("job-1", min_score=0.5)] == ["w-1"]


class TestServiceAgainstDatabase:

    def test_match_job_persists_results(self, repo, db_session):
        batch = MatchService(repo, MatchOrchestrator(MatchingConfig(max_workers=2))).match_job("job-1")
        db_session.commit()

        assert [m.worker_id for m in batch.matches] == ["w-1", "w-2"]
        assert db_session.query(MatchRecord).count() == 2
