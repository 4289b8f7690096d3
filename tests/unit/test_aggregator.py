"""Tests for month, quarter and year aggregation."""

import pytest

from app.schemas.catalog import Metric, MetricType, Role
from app.schemas.scorecard import Grade
from app.services.aggregator import build_summary, score_month, score_span, summary_matches
from app.services.periods import month_start_week

YEAR = 2024

CALLS = Metric(id=1, role_id=1, name="Calls", metric_type=MetricType.COUNT, goal_value=50, display_order=1)
EFFORT = Metric(id=2, role_id=1, name="Effort", metric_type=MetricType.RATING_1_5, goal_value=5, display_order=2)
ROLE = Role(id=1, owner_id="owner-1", name="Sales")


def _find(snapshot, name, role_name="Sales"):
    card = next(c for c in snapshot.role_scorecards if c.role_name == role_name)
    return next(s for s in card.metrics if s.metric_name == name)


async def _metric_named(engine, owner_id, role_id, name):
    metrics = (await engine.list_metrics(owner_id, role_id)).data
    return next(m for m in metrics if m.name == name)


class TestScoreFunctions:
    def test_score_month_uses_month_weeks_only(self):
        weeks = {1: {1: 10, 2: 20, 5: 999}}
        [score] = score_month([CALLS], weeks, 1)
        assert score.actual_value == 30
        assert score.goal_value == 50
        assert score.percentage_of_goal == pytest.approx(60)

    def test_score_span_sums_counts_and_scales_goal(self):
        weeks = {1: {1: 100, 5: 100, 9: 100}}
        [score] = score_span([CALLS], weeks, [1, 2, 3])
        assert score.actual_value == 300
        assert score.goal_value == 150
        assert score.percentage_of_goal == 200
        assert score.grade == Grade.A

    def test_score_span_averages_ratings_over_months_with_data(self):
        weeks = {2: {1: 4, 5: 5}}
        [score] = score_span([EFFORT], weeks, [1, 2, 3])
        assert score.actual_value == 4.5
        assert score.goal_value == 5
        assert score.percentage_of_goal == pytest.approx(90)

    def test_score_span_without_any_data(self):
        [rating, count] = score_span([EFFORT, CALLS], {}, [1, 2, 3])
        assert rating.actual_value == 0
        assert count.actual_value == 0
        assert count.grade == Grade.F


class TestSummaryMatches:
    def test_matching_summary(self):
        summary = build_summary(ROLE, 1, YEAR, score_month([CALLS, EFFORT], {}, 1))
        assert summary_matches(summary, [CALLS, EFFORT])

    def test_new_metric_makes_summary_stale(self):
        summary = build_summary(ROLE, 1, YEAR, score_month([CALLS], {}, 1))
        assert not summary_matches(summary, [CALLS, EFFORT])

    def test_goal_change_makes_summary_stale(self):
        summary = build_summary(ROLE, 1, YEAR, score_month([CALLS], {}, 1))
        assert not summary_matches(summary, [CALLS.model_copy(update={"goal_value": 75})])

    def test_replaced_metric_makes_summary_stale(self):
        summary = build_summary(ROLE, 1, YEAR, score_month([CALLS], {}, 1))
        assert not summary_matches(summary, [CALLS.model_copy(update={"id": 9})])


class TestPeriods:
    @pytest.mark.asyncio
    async def test_quarter_of_identical_months(self, engine, owner, make_metric):
        metric = await make_metric(owner, "Calls", goal_value=50)
        for month in (1, 2, 3):
            result = await engine.save_weekly_data(owner, metric.id, month_start_week(month), YEAR, 100)
            assert result.success

        result = await engine.get_scorecard(owner, "quarter", 1, YEAR)

        assert result.success
        score = _find(result.data, "Calls")
        assert score.actual_value == 300
        assert score.goal_value == 150
        assert score.percentage_of_goal == 200
        assert score.grade == Grade.A
        assert result.data.company_summary.quarter == 1

    @pytest.mark.asyncio
    async def test_single_rating_entry_is_not_divided(self, engine, owner):
        role = (await engine.create_role(owner, "Sales")).data
        effort = await _metric_named(engine, owner, role.id, "Effort")
        await engine.save_weekly_data(owner, effort.id, 1, YEAR, 40)

        snapshot = (await engine.get_scorecard(owner, "month", 1, YEAR)).data

        score = _find(snapshot, "Effort")
        assert score.actual_value == 40
        assert score.percentage_of_goal == 800

    @pytest.mark.asyncio
    async def test_weekly_ratings_average_over_four_weeks(self, engine, owner):
        role = (await engine.create_role(owner, "Sales")).data
        effort = await _metric_named(engine, owner, role.id, "Effort")
        await engine.save_month_entries(owner, effort.id, 1, YEAR, [4, 4, 5, 3])

        snapshot = (await engine.get_scorecard(owner, "month", 1, YEAR)).data

        score = _find(snapshot, "Effort")
        assert score.actual_value == 4
        assert score.percentage_of_goal == pytest.approx(80)
        assert score.grade == Grade.B

    @pytest.mark.asyncio
    async def test_inverted_zero_actual_scores_f(self, engine, owner, make_metric):
        metric = await make_metric(owner, "Error Rate", metric_type="percentage", goal_value=10, is_inverted=True)
        await engine.save_weekly_data(owner, metric.id, 1, YEAR, 0)

        snapshot = (await engine.get_scorecard(owner, "month", 1, YEAR)).data

        score = _find(snapshot, "Error Rate")
        assert score.percentage_of_goal == 0
        assert score.grade == Grade.F

    @pytest.mark.asyncio
    async def test_year_mixes_sums_and_averages(self, engine, owner, make_metric):
        calls = await make_metric(owner, "Calls", goal_value=10)
        effort = await _metric_named(engine, owner, calls.role_id, "Effort")
        await engine.save_weekly_data(owner, calls.id, month_start_week(1), YEAR, 60)
        await engine.save_weekly_data(owner, calls.id, month_start_week(12), YEAR, 60)
        await engine.save_weekly_data(owner, effort.id, month_start_week(1), YEAR, 4)
        await engine.save_weekly_data(owner, effort.id, month_start_week(2), YEAR, 5)

        result = await engine.get_scorecard(owner, "year", 7, YEAR)

        assert result.success
        assert result.data.period_value is None
        calls_score = _find(result.data, "Calls")
        assert calls_score.actual_value == 120
        assert calls_score.goal_value == 120
        effort_score = _find(result.data, "Effort")
        assert effort_score.actual_value == 4.5
        assert effort_score.percentage_of_goal == pytest.approx(90)

    @pytest.mark.asyncio
    async def test_invalid_period(self, engine, owner):
        assert (await engine.get_scorecard(owner, "month", 13, YEAR)).code == "validation_error"
        assert (await engine.get_scorecard(owner, "week", 1, YEAR)).code == "validation_error"
        assert (await engine.get_scorecard(owner, "quarter", 1, 1800)).code == "validation_error"


class TestMonthlySummaries:
    @pytest.mark.asyncio
    async def test_stored_summary_is_reused(self, engine, store, owner, make_metric):
        metric = await make_metric(owner, "Calls", goal_value=50)
        await engine.save_weekly_data(owner, metric.id, 1, YEAR, 25)
        await engine.calculate_monthly_summary(owner, 1, YEAR)
        writes = store.calls["replace_monthly_summary"]

        snapshot = (await engine.get_scorecard(owner, "month", 1, YEAR)).data

        assert store.calls["replace_monthly_summary"] == writes
        assert _find(snapshot, "Calls").actual_value == 25

    @pytest.mark.asyncio
    async def test_new_weekly_data_replaces_stored_summary(self, engine, store, owner, make_metric):
        metric = await make_metric(owner, "Calls", goal_value=50)
        await engine.save_weekly_data(owner, metric.id, 1, YEAR, 10)
        first = (await engine.get_scorecard(owner, "month", 1, YEAR)).data
        assert _find(first, "Calls").actual_value == 10

        await engine.save_weekly_data(owner, metric.id, 1, YEAR, 40)
        assert await store.get_monthly_summary(metric.role_id, 1, YEAR) is None

        month = (await engine.get_scorecard(owner, "month", 1, YEAR)).data
        quarter = (await engine.get_scorecard(owner, "quarter", 1, YEAR)).data

        assert _find(month, "Calls").actual_value == 40
        assert _find(quarter, "Calls").actual_value == 40
        stored = await store.get_monthly_summary(metric.role_id, 1, YEAR)
        assert next(s for s in stored.metric_scores if s.metric_id == metric.id).actual_value == 40

    @pytest.mark.asyncio
    async def test_month_entries_replace_stored_summary(self, engine, owner, make_metric):
        metric = await make_metric(owner, "Calls", goal_value=50)
        await engine.calculate_monthly_summary(owner, 2, YEAR)

        await engine.save_month_entries(owner, metric.id, 2, YEAR, [10, 10, 20, 10])
        month = (await engine.get_scorecard(owner, "month", 2, YEAR)).data

        assert _find(month, "Calls").actual_value == 50
        assert _find(month, "Calls").grade == Grade.A

    @pytest.mark.asyncio
    async def test_other_months_keep_their_summary(self, engine, store, owner, make_metric):
        metric = await make_metric(owner, "Calls", goal_value=50)
        await engine.calculate_monthly_summary(owner, 1, YEAR)

        await engine.save_weekly_data(owner, metric.id, month_start_week(2), YEAR, 30)

        assert await store.get_monthly_summary(metric.role_id, 1, YEAR) is not None

    @pytest.mark.asyncio
    async def test_goal_change_triggers_recompute(self, engine, store, owner, make_metric):
        metric = await make_metric(owner, "Calls", goal_value=50)
        await engine.save_weekly_data(owner, metric.id, 1, YEAR, 25)
        await engine.calculate_monthly_summary(owner, 1, YEAR)
        writes = store.calls["replace_monthly_summary"]

        await engine.update_metric_goal(owner, metric.id, 25)
        snapshot = (await engine.get_scorecard(owner, "month", 1, YEAR)).data

        assert store.calls["replace_monthly_summary"] == writes + 1
        score = _find(snapshot, "Calls")
        assert score.goal_value == 25
        assert score.percentage_of_goal == 100

    @pytest.mark.asyncio
    async def test_new_metric_triggers_recompute(self, engine, owner, make_metric):
        await make_metric(owner, "Calls", goal_value=50)
        await engine.calculate_monthly_summary(owner, 1, YEAR)
        await make_metric(owner, "Emails", goal_value=5)

        snapshot = (await engine.get_scorecard(owner, "month", 1, YEAR)).data

        assert _find(snapshot, "Emails").actual_value == 0

    @pytest.mark.asyncio
    async def test_recompute_is_idempotent(self, engine, owner, make_metric):
        metric = await make_metric(owner, "Calls", goal_value=40)
        await engine.save_month_entries(owner, metric.id, 1, YEAR, [10, 5, 0, 15])

        first = (await engine.calculate_monthly_summary(owner, 1, YEAR)).data
        second = (await engine.calculate_monthly_summary(owner, 1, YEAR)).data

        assert first.role_scorecards == second.role_scorecards
        assert first.company_summary == second.company_summary

    @pytest.mark.asyncio
    async def test_company_summary_is_stored(self, engine, store, owner, make_metric):
        await make_metric(owner, "Calls", goal_value=50)
        await make_metric(owner, "Tickets", goal_value=5, role_name="Support")

        snapshot = (await engine.get_scorecard(owner, "month", 2, YEAR)).data

        stored = await store.get_company_summary(owner, 2, YEAR)
        assert stored == snapshot.company_summary
        assert stored.month == 2


class TestBatchedAccess:
    @pytest.mark.asyncio
    async def test_month_reads_are_batched(self, engine, store, owner, make_metric):
        for role_name in ("Sales", "Support", "Ops"):
            await make_metric(owner, f"{role_name} volume", role_name=role_name)
        store.calls.clear()

        result = await engine.get_scorecard(owner, "month", 1, YEAR)

        assert result.success
        assert store.calls["get_monthly_summaries"] == 1
        assert store.calls["get_monthly_summary"] == 0
        assert store.calls["get_weekly_data"] == 1
        assert store.calls["replace_monthly_summary"] == 3
        assert store.calls["get_metric"] == 0

    @pytest.mark.asyncio
    async def test_span_reads_are_batched(self, engine, store, owner, make_metric):
        for role_name in ("Sales", "Support", "Ops"):
            await make_metric(owner, f"{role_name} volume", role_name=role_name)
        store.calls.clear()

        await engine.get_scorecard(owner, "year", None, YEAR)

        assert store.calls["get_weekly_data"] == 1
        assert store.calls["get_monthly_summaries"] == 0
        assert store.calls["replace_monthly_summary"] == 0
