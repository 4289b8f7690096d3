"""Roll raw weekly entries up into graded month, quarter and year scores.

Month results are persisted as ``MonthlySummary`` rows and reused while
they still match the catalog.  Quarter and year results are always
computed on the fly from the raw weekly series, never stored.
"""
import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from app.schemas.catalog import Metric, Role
from app.schemas.scorecard import MetricScore, MonthlySummary, PeriodType
from app.services.grading import calculate_grade, mean_percentage, percentage_of_goal
from app.services.periods import goal_multiplier, period_months, resolve_month_actual, span_week_range
from app.store.base import ScorecardStore

logger = logging.getLogger(__name__)

RoleMetrics = List[Tuple[Role, List[Metric]]]
RoleScores = List[Tuple[Role, List[MetricScore]]]
WeeksByMetric = Dict[int, Dict[int, float]]


def score_metric(metric: Metric, actual: float, goal: float) -> MetricScore:
    percentage = percentage_of_goal(actual, goal, metric.is_inverted)
    return MetricScore(
        metric_id=metric.id,
        metric_name=metric.name,
        metric_type=metric.metric_type,
        goal_value=goal,
        actual_value=actual,
        percentage_of_goal=percentage,
        grade=calculate_grade(percentage),
    )


def score_month(metrics: Sequence[Metric], weeks: WeeksByMetric, month: int) -> List[MetricScore]:
    scores = []
    for metric in metrics:
        actual, _ = resolve_month_actual(weeks.get(metric.id, {}), month, metric.metric_type)
        scores.append(score_metric(metric, actual, metric.goal_value))
    return scores


def score_span(metrics: Sequence[Metric], weeks: WeeksByMetric, months: Sequence[int]) -> List[MetricScore]:
    """Score metrics over several months.

    Counts, currency, percentages and durations are summed across months
    and their goal multiplied by the month count.  Ratings are averaged
    over the months that hold data and keep their monthly goal.
    """
    scores = []
    for metric in metrics:
        monthly = [resolve_month_actual(weeks.get(metric.id, {}), m, metric.metric_type) for m in months]
        if metric.metric_type.is_rating:
            with_data = [actual for actual, has_data in monthly if has_data]
            actual = sum(with_data) / len(with_data) if with_data else 0.0
        else:
            actual = sum(actual for actual, _ in monthly)
        goal = metric.goal_value * goal_multiplier(metric.metric_type, len(months))
        scores.append(score_metric(metric, actual, goal))
    return scores


def build_summary(role: Role, month: int, year: int, scores: List[MetricScore]) -> MonthlySummary:
    average = mean_percentage(s.percentage_of_goal for s in scores)
    return MonthlySummary(
        role_id=role.id,
        month=month,
        year=year,
        average_grade_percentage=average,
        average_grade=calculate_grade(average),
        metric_scores=scores,
    )


def summary_matches(summary: MonthlySummary, metrics: Sequence[Metric]) -> bool:
    """True when a stored summary still scores exactly the current metrics."""
    if len(summary.metric_scores) != len(metrics):
        return False
    by_id = {s.metric_id: s for s in summary.metric_scores}
    for metric in metrics:
        score = by_id.get(metric.id)
        if score is None:
            return False
        if (score.metric_name, score.metric_type, score.goal_value) != (
            metric.name, metric.metric_type, metric.goal_value
        ):
            return False
    return True


class PeriodAggregator:

    def __init__(self, store: ScorecardStore):
        self.store = store

    async def load_weeks(self, metrics: Sequence[Metric], year: int, months: Sequence[int]) -> WeeksByMetric:
        """Fetch every stored row for ``metrics`` across ``months`` in one call."""
        weeks: WeeksByMetric = defaultdict(dict)
        if not metrics:
            return weeks
        points = await self.store.get_weekly_data([m.id for m in metrics], year, span_week_range(list(months)))
        for point in points:
            weeks[point.metric_id][point.week_number] = point.actual_value
        return weeks

    async def aggregate_month(
        self, catalog: RoleMetrics, month: int, year: int, recompute: bool = False
    ) -> Tuple[RoleScores, int]:
        """Score every role for one month, reusing stored summaries that still match.

        Returns the per-role scores in catalog order and how many summaries
        were recomputed and written.
        """
        cached: Dict[int, MonthlySummary] = {}
        if not recompute and catalog:
            summaries = await self.store.get_monthly_summaries([r.id for r, _ in catalog], month, year)
            cached = {s.role_id: s for s in summaries}

        stale = [
            (role, metrics) for role, metrics in catalog
            if role.id not in cached or not summary_matches(cached[role.id], metrics)
        ]
        weeks = await self.load_weeks([m for _, metrics in stale for m in metrics], year, [month])

        fresh: Dict[int, MonthlySummary] = {}
        for role, metrics in stale:
            summary = build_summary(role, month, year, score_month(metrics, weeks, month))
            await self.store.replace_monthly_summary(summary)
            fresh[role.id] = summary
            logger.info("Recomputed summary for role %r, %d/%d", role.name, month, year)

        results: RoleScores = []
        for role, metrics in catalog:
            summary = fresh.get(role.id) or cached[role.id]
            order = {m.id: i for i, m in enumerate(metrics)}
            scores = sorted(summary.metric_scores, key=lambda s: order.get(s.metric_id, len(order)))
            results.append((role, scores))
        return results, len(fresh)

    async def aggregate_span(
        self, catalog: RoleMetrics, period_type: PeriodType, period_value: Optional[int], year: int
    ) -> RoleScores:
        months = period_months(period_type, period_value)
        weeks = await self.load_weeks([m for _, metrics in catalog for m in metrics], year, months)
        return [(role, score_span(metrics, weeks, months)) for role, metrics in catalog]

