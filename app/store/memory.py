"""In-memory scorecard store for tests and local experiments.

Behaves like the SQL store: unique keys are enforced, upserts are
last-writer-wins and summary replacement is all-or-nothing.  ``calls``
counts invocations per method so tests can assert batched access.
"""
import itertools
from collections import Counter
from typing import Dict, List, Optional, Sequence, Set, Tuple

from app.core.errors import PersistenceError
from app.schemas.catalog import Metric, MetricType, Role
from app.schemas.scorecard import CompanySummary, MonthlySummary
from app.schemas.weekly_data import WeeklyDataPoint
from app.store.base import WeekRange


class InMemoryScorecardStore:

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._roles: Dict[int, Role] = {}
        self._metrics: Dict[int, Metric] = {}
        self._weekly: Dict[Tuple[int, int, int], float] = {}
        self._summaries: Dict[Tuple[int, int, int], MonthlySummary] = {}
        self._company: Dict[Tuple[str, int, int], CompanySummary] = {}
        self.calls: Counter = Counter()
        # metric ids whose writes fail, to exercise error paths
        self.failing_metric_ids: Set[int] = set()

    def _check_writable(self, metric_id: int) -> None:
        if metric_id in self.failing_metric_ids:
            raise PersistenceError(f"write rejected for metric {metric_id}")

    # Catalog

    async def get_roles(self, owner_id: str) -> List[Role]:
        self.calls["get_roles"] += 1
        roles = [r for r in self._roles.values() if r.owner_id == owner_id]
        return sorted(roles, key=lambda r: (r.name, r.id))

    async def get_role(self, role_id: int) -> Optional[Role]:
        self.calls["get_role"] += 1
        return self._roles.get(role_id)

    async def create_role(self, owner_id: str, name: str) -> Role:
        self.calls["create_role"] += 1
        if any(r.owner_id == owner_id and r.name == name for r in self._roles.values()):
            raise PersistenceError(f"role {name!r} already exists")
        role = Role(id=next(self._ids), owner_id=owner_id, name=name)
        self._roles[role.id] = role
        return role

    async def delete_role(self, role_id: int) -> None:
        self.calls["delete_role"] += 1
        self._roles.pop(role_id, None)
        for metric_id in [m.id for m in self._metrics.values() if m.role_id == role_id]:
            self._drop_metric(metric_id)
        for key in [k for k in self._summaries if k[0] == role_id]:
            del self._summaries[key]

    async def get_metrics(self, role_ids: Sequence[int]) -> List[Metric]:
        self.calls["get_metrics"] += 1
        wanted = set(role_ids)
        metrics = [m for m in self._metrics.values() if m.role_id in wanted]
        return sorted(metrics, key=lambda m: (m.role_id, m.display_order, m.id))

    async def get_metric(self, metric_id: int) -> Optional[Metric]:
        self.calls["get_metric"] += 1
        return self._metrics.get(metric_id)

    async def create_metric(
        self,
        role_id: int,
        name: str,
        metric_type: MetricType,
        goal_value: float,
        is_inverted: bool,
        display_order: int,
        is_visible: bool = True,
    ) -> Metric:
        self.calls["create_metric"] += 1
        if role_id not in self._roles:
            raise PersistenceError(f"role {role_id} does not exist")
        if any(m.role_id == role_id and m.name == name for m in self._metrics.values()):
            raise PersistenceError(f"metric {name!r} already exists on role {role_id}")
        metric = Metric(
            id=next(self._ids),
            role_id=role_id,
            name=name,
            metric_type=metric_type,
            goal_value=goal_value,
            is_inverted=is_inverted,
            display_order=display_order,
            is_visible=is_visible,
        )
        self._metrics[metric.id] = metric
        return metric

    async def delete_metric(self, metric_id: int) -> None:
        self.calls["delete_metric"] += 1
        self._drop_metric(metric_id)

    def _drop_metric(self, metric_id: int) -> None:
        self._metrics.pop(metric_id, None)
        for key in [k for k in self._weekly if k[0] == metric_id]:
            del self._weekly[key]
        for key, summary in list(self._summaries.items()):
            kept = [s for s in summary.metric_scores if s.metric_id != metric_id]
            if len(kept) != len(summary.metric_scores):
                self._summaries[key] = summary.model_copy(update={"metric_scores": kept})

    async def upsert_metric_goal(self, metric_id: int, goal_value: float) -> None:
        self.calls["upsert_metric_goal"] += 1
        self._check_writable(metric_id)
        metric = self._metrics.get(metric_id)
        if metric is None:
            raise PersistenceError(f"metric {metric_id} does not exist")
        self._metrics[metric_id] = metric.model_copy(update={"goal_value": goal_value})

    async def set_metric_visibility(self, metric_id: int, is_visible: bool) -> None:
        self.calls["set_metric_visibility"] += 1
        self._check_writable(metric_id)
        metric = self._metrics.get(metric_id)
        if metric is None:
            raise PersistenceError(f"metric {metric_id} does not exist")
        self._metrics[metric_id] = metric.model_copy(update={"is_visible": is_visible})

    # Raw weekly series

    async def get_weekly_data(
        self, metric_ids: Sequence[int], year: int, week_range: WeekRange
    ) -> List[WeeklyDataPoint]:
        self.calls["get_weekly_data"] += 1
        wanted = set(metric_ids)
        first, last = week_range
        points = [
            WeeklyDataPoint(metric_id=m, week_number=w, year=y, actual_value=v)
            for (m, w, y), v in self._weekly.items()
            if m in wanted and y == year and first <= w <= last
        ]
        return sorted(points, key=lambda p: (p.metric_id, p.week_number))

    async def upsert_weekly_data(self, point: WeeklyDataPoint) -> None:
        self.calls["upsert_weekly_data"] += 1
        self._check_writable(point.metric_id)
        if point.metric_id not in self._metrics:
            raise PersistenceError(f"metric {point.metric_id} does not exist")
        self._weekly[(point.metric_id, point.week_number, point.year)] = point.actual_value

    # Derived summaries

    async def get_monthly_summaries(
        self, role_ids: Sequence[int], month: int, year: int
    ) -> List[MonthlySummary]:
        self.calls["get_monthly_summaries"] += 1
        return [
            self._summaries[(role_id, month, year)]
            for role_id in role_ids
            if (role_id, month, year) in self._summaries
        ]

    async def get_monthly_summary(self, role_id: int, month: int, year: int) -> Optional[MonthlySummary]:
        self.calls["get_monthly_summary"] += 1
        return self._summaries.get((role_id, month, year))

    async def replace_monthly_summary(self, summary: MonthlySummary) -> None:
        self.calls["replace_monthly_summary"] += 1
        if summary.role_id not in self._roles:
            raise PersistenceError(f"role {summary.role_id} does not exist")
        self._summaries[(summary.role_id, summary.month, summary.year)] = summary

    async def delete_monthly_summary(self, role_id: int, month: int, year: int) -> None:
        self.calls["delete_monthly_summary"] += 1
        self._summaries.pop((role_id, month, year), None)

    async def get_company_summary(self, owner_id: str, month: int, year: int) -> Optional[CompanySummary]:
        self.calls["get_company_summary"] += 1
        return self._company.get((owner_id, month, year))

    async def upsert_company_summary(self, summary: CompanySummary) -> None:
        self.calls["upsert_company_summary"] += 1
        if summary.month is None:
            raise PersistenceError("company summaries are stored per month")
        self._company[(summary.owner_id, summary.month, summary.year)] = summary
