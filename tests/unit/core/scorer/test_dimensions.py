#!/usr/bin/env python3
"""
Unit tests for the per-dimension scorers.
"""

import unittest
from datetime import timedelta

from core.availability.models import AvailabilityStatus, AvailabilityType
from core.config_loader import ScorerConfig
from core.geo import distance_km
from core.scorer.dimensions import (
    availability_score,
    experience_score,
    location_score,
    salary_score,
    score_dimensions,
    skill_score,
)
from core.scorer.models import SalaryExpectation, SalaryRange
from tests.factories import (
    MONDAY,
    NEAR_TOKYO,
    OSAKA,
    TOKYO,
    available_on,
    make_job,
    make_worker,
    unavailable_on,
    weekly_rule,
)


class TestSkillScore(unittest.TestCase):

    def test_full_overlap(self):
        self.assertEqual(skill_score(["python", "sql"], ["python", "sql"]), 1.0)

    def test_partial_overlap(self):
        self.assertAlmostEqual(skill_score(["python"], ["python", "sql", "go"]), 1 / 3)

    def test_extra_worker_skills_do_not_count(self):
        self.assertEqual(skill_score(["python", "sql", "rust", "go"], ["python", "sql"]), 1.0)

    def test_case_and_whitespace_insensitive(self):
        self.assertEqual(skill_score(["  Forklift ", "INVENTORY"], ["forklift", "Inventory"]), 1.0)

    def test_job_without_skills_scores_zero(self):
        self.assertEqual(skill_score(["python"], []), 0.0)
        self.assertEqual(skill_score(["python"], None), 0.0)

    def test_worker_without_skills_scores_zero(self):
        self.assertEqual(skill_score([], ["python"]), 0.0)


class TestExperienceScore(unittest.TestCase):

    def test_ratio(self):
        self.assertAlmostEqual(experience_score(2, 4), 0.5)

    def test_capped_at_one(self):
        self.assertEqual(experience_score(10, 2), 1.0)

    def test_nothing_required(self):
        self.assertEqual(experience_score(0, 0), 1.0)
        self.assertEqual(experience_score(None, None), 1.0)

    def test_unknown_worker_experience(self):
        self.assertEqual(experience_score(None, 3), 0.0)


class TestSalaryScore(unittest.TestCase):

    def test_exact_match(self):
        self.assertEqual(salary_score(SalaryExpectation(100), SalaryRange(max=100)), 1.0)

    def test_five_percent_gap_at_twenty_percent_tolerance(self):
        score = salary_score(SalaryExpectation(95), SalaryRange(max=100), 20)
        self.assertAlmostEqual(score, 0.75)

    def test_gap_beyond_tolerance(self):
        self.assertEqual(salary_score(SalaryExpectation(150), SalaryRange(max=100), 20), 0.0)

    def test_expectation_above_max_is_penalised_symmetrically(self):
        self.assertAlmostEqual(salary_score(SalaryExpectation(105), SalaryRange(max=100), 20), 0.75)

    def test_missing_values(self):
        self.assertEqual(salary_score(None, SalaryRange(max=100)), 0.0)
        self.assertEqual(salary_score(SalaryExpectation(100), None), 0.0)
        self.assertEqual(salary_score(SalaryExpectation(None), SalaryRange(max=100)), 0.0)
        self.assertEqual(salary_score(SalaryExpectation(100), SalaryRange(min=50)), 0.0)
        self.assertEqual(salary_score(SalaryExpectation(0), SalaryRange(max=100)), 0.0)

    def test_currency_mismatch(self):
        score = salary_score(SalaryExpectation(100, "EUR"), SalaryRange(max=100, currency="USD"))
        self.assertEqual(score, 0.0)

    def test_currency_compare_is_case_insensitive(self):
        score = salary_score(SalaryExpectation(100, "usd"), SalaryRange(max=100, currency="USD"))
        self.assertEqual(score, 1.0)


class TestLocationScore(unittest.TestCase):

    def test_same_place(self):
        self.assertEqual(location_score(TOKYO, TOKYO), 1.0)

    def test_nearby(self):
        score = location_score(NEAR_TOKYO, TOKYO, 50)
        self.assertGreater(score, 0.95)
        self.assertLess(score, 1.0)

    def test_beyond_radius(self):
        self.assertEqual(location_score(OSAKA, TOKYO, 50), 0.0)

    def test_exactly_at_radius(self):
        radius = distance_km(NEAR_TOKYO, TOKYO)
        self.assertEqual(location_score(NEAR_TOKYO, TOKYO, radius), 0.0)

    def test_unknown_location(self):
        self.assertEqual(location_score(None, TOKYO), 0.0)
        self.assertEqual(location_score({"lat": None}, TOKYO), 0.0)


class TestAvailabilityScore(unittest.TestCase):

    def test_declared_and_unblocked(self):
        self.assertEqual(availability_score(make_worker(), make_job()), 1.0)

    def test_blocked_by_unavailable_entry(self):
        worker = make_worker(availability=[available_on("worker-1"), unavailable_on("worker-1")])
        self.assertEqual(availability_score(worker, make_job()), 0.0)

    def test_blocked_by_recurring_unavailability(self):
        weekly_off = unavailable_on(
            "worker-1",
            is_recurring=True,
            recurrence=weekly_rule({0}),
            end_date=MONDAY + timedelta(weeks=12),
        )
        worker = make_worker(availability=[available_on("worker-1", days=30), weekly_off])
        job = make_job(
            schedule_start=MONDAY + timedelta(weeks=2),
            schedule_end=MONDAY + timedelta(weeks=2),
        )
        self.assertEqual(availability_score(worker, job), 0.0)

    def test_no_entries_means_undeclared(self):
        self.assertEqual(availability_score(make_worker(availability=[]), make_job()), 0.0)

    def test_inactive_blocker_is_ignored(self):
        blocker = unavailable_on("worker-1", status=AvailabilityStatus.INACTIVE)
        worker = make_worker(availability=[available_on("worker-1"), blocker])
        self.assertEqual(availability_score(worker, make_job()), 1.0)

    def test_tentative_does_not_declare(self):
        tentative = available_on("worker-1", type=AvailabilityType.TENTATIVE)
        self.assertEqual(availability_score(make_worker(availability=[tentative]), make_job()), 0.0)

    def test_job_without_schedule(self):
        self.assertEqual(availability_score(make_worker(), make_job(schedule_start=None)), 0.0)


class TestScoreDimensions(unittest.TestCase):

    def test_only_requested_dimensions_are_scored(self):
        scores = score_dimensions(make_job(), make_worker(), ScorerConfig(), ["skill", "salary"])
        self.assertEqual(scores.skill, 1.0)
        self.assertAlmostEqual(scores.salary, 0.75)
        self.assertEqual(scores.experience, 0.0)
        self.assertEqual(scores.availability, 0.0)

    def test_scorer_config_tolerances_apply(self):
        config = ScorerConfig(max_distance_km=500, max_salary_diff_percent=10)
        worker = make_worker(preferred_location=OSAKA)
        scores = score_dimensions(make_job(), worker, config, ["location", "salary"])
        self.assertGreater(scores.location, 0.0)
        self.assertAlmostEqual(scores.salary, 0.5)


if __name__ == "__main__":
    unittest.main()
