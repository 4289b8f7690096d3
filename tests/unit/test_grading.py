"""Tests for percentage-of-goal, letter grades and the finite mean."""

import math

import pytest

from app.schemas.scorecard import Grade
from app.services.grading import calculate_grade, mean_percentage, percentage_of_goal


class TestPercentageOfGoal:
    def test_actual_over_goal(self):
        assert percentage_of_goal(150, 100, False) == 150

    def test_actual_equal_to_goal_is_100(self):
        assert percentage_of_goal(37.5, 37.5, False) == 100

    def test_zero_goal_scores_zero(self):
        assert percentage_of_goal(50, 0, False) == 0
        assert percentage_of_goal(50, 0, True) == 0

    def test_inverted_is_goal_over_actual(self):
        assert percentage_of_goal(60, 30, True) == 50
        assert percentage_of_goal(30, 30, True) == 100

    def test_inverted_zero_actual_scores_zero(self):
        pct = percentage_of_goal(0, 10, True)
        assert pct == 0
        assert calculate_grade(pct) == Grade.F

    def test_no_upper_clamp(self):
        assert percentage_of_goal(1000, 10, False) == 10000


class TestCalculateGrade:
    @pytest.mark.parametrize(
        "pct, grade",
        [
            (150, Grade.A),
            (90, Grade.A),
            (89.99, Grade.B),
            (80, Grade.B),
            (79.99, Grade.C),
            (70, Grade.C),
            (60, Grade.D),
            (59.99, Grade.F),
            (0, Grade.F),
        ],
    )
    def test_boundaries(self, pct, grade):
        assert calculate_grade(pct) == grade


class TestMeanPercentage:
    def test_empty_is_zero(self):
        assert mean_percentage([]) == 0

    def test_ignores_non_finite(self):
        assert mean_percentage([math.nan, 80, math.inf, 100]) == 90

    def test_only_non_finite_is_zero(self):
        assert mean_percentage([math.nan, -math.inf]) == 0

    def test_accepts_generators(self):
        assert mean_percentage(p for p in (50, 70)) == 60
