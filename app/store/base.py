"""Persistence port for the scorecard engine.

The engine never talks to a database directly; it is handed an object
satisfying :class:`ScorecardStore` at construction.  ``SqlScorecardStore``
backs it with SQLAlchemy, ``InMemoryScorecardStore`` with plain dicts.

Read methods taking a collection of ids are batched: one call returns the
rows for every id, so aggregating N roles with M metrics costs a constant
number of round trips.  Failures surface as
:class:`app.core.errors.PersistenceError`.
"""
from typing import List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from app.schemas.catalog import Metric, MetricType, Role
from app.schemas.scorecard import CompanySummary, MonthlySummary
from app.schemas.weekly_data import WeeklyDataPoint

WeekRange = Tuple[int, int]  # inclusive (first_week, last_week)


@runtime_checkable
class ScorecardStore(Protocol):

    # Catalog

    async def get_roles(self, owner_id: str) -> List[Role]: ...

    async def get_role(self, role_id: int) -> Optional[Role]: ...

    async def create_role(self, owner_id: str, name: str) -> Role: ...

    async def delete_role(self, role_id: int) -> None: ...

    async def get_metrics(self, role_ids: Sequence[int]) -> List[Metric]: ...

    async def get_metric(self, metric_id: int) -> Optional[Metric]: ...

    async def create_metric(
        self,
        role_id: int,
        name: str,
        metric_type: MetricType,
        goal_value: float,
        is_inverted: bool,
        display_order: int,
        is_visible: bool = True,
    ) -> Metric: ...

    async def delete_metric(self, metric_id: int) -> None: ...

    async def upsert_metric_goal(self, metric_id: int, goal_value: float) -> None: ...

    async def set_metric_visibility(self, metric_id: int, is_visible: bool) -> None: ...

    # Raw weekly series

    async def get_weekly_data(
        self, metric_ids: Sequence[int], year: int, week_range: WeekRange
    ) -> List[WeeklyDataPoint]: ...

    async def upsert_weekly_data(self, point: WeeklyDataPoint) -> None: ...

    # Derived summaries

    async def get_monthly_summaries(
        self, role_ids: Sequence[int], month: int, year: int
    ) -> List[MonthlySummary]: ...

    async def get_monthly_summary(self, role_id: int, month: int, year: int) -> Optional[MonthlySummary]: ...

    async def replace_monthly_summary(self, summary: MonthlySummary) -> None: ...

    async def delete_monthly_summary(self, role_id: int, month: int, year: int) -> None: ...

    async def get_company_summary(self, owner_id: str, month: int, year: int) -> Optional[CompanySummary]: ...

    async def upsert_company_summary(self, summary: CompanySummary) -> None: ...
