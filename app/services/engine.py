"""Public entry point of the scorecard engine.

Every method takes the caller's owner id and returns an
:class:`OperationResult`; expected failures (missing identity, unknown or
foreign ids, bad input, store errors, partially failed batches) come back
as ``success=False`` results instead of exceptions.
"""
import logging
from typing import Any, Awaitable, Callable, Optional, Sequence

from app.core.errors import NotAuthenticated, PartialBatchFailure, ScorecardError
from app.schemas.result import OperationResult
from app.services.aggregator import PeriodAggregator
from app.services.catalog import CatalogService
from app.services.scorecard import ScorecardService
from app.services.weekly_data import WeeklyDataService
from app.store.base import ScorecardStore

logger = logging.getLogger(__name__)


class ScorecardEngine:

    def __init__(self, store: ScorecardStore, seed_default_roles: bool = True):
        self.store = store
        self.seed_default_roles = seed_default_roles
        self.catalog = CatalogService(store)
        self.weekly = WeeklyDataService(store, self.catalog)
        self.aggregator = PeriodAggregator(store)
        self.scorecards = ScorecardService(store, self.catalog, self.aggregator)

    async def _call(self, owner_id: Optional[str], fn: Callable[..., Awaitable[Any]], *args, **kwargs) -> OperationResult:
        if not owner_id:
            exc = NotAuthenticated("User not authenticated")
            return OperationResult.fail(exc.code, exc.message)
        try:
            data = await fn(owner_id, *args, **kwargs)
        except PartialBatchFailure as exc:
            return OperationResult.fail(exc.code, exc.message, exc.errors)
        except ScorecardError as exc:
            logger.debug("%s failed: %s", fn.__name__, exc.message)
            return OperationResult.fail(exc.code, exc.message)
        return OperationResult.ok(data)

    # Scorecards

    async def get_scorecard(
        self, owner_id: Optional[str], period_type: Any, period_value: Optional[int], year: int, recompute: bool = False
    ) -> OperationResult:
        return await self._call(owner_id, self.scorecards.get_scorecard, period_type, period_value, year, recompute)

    async def calculate_monthly_summary(self, owner_id: Optional[str], month: int, year: int) -> OperationResult:
        return await self._call(owner_id, self.scorecards.calculate_monthly_summary, month, year)

    # Catalog

    async def initialize_catalog(self, owner_id: Optional[str]) -> OperationResult:
        return await self._call(owner_id, self.catalog.initialize_catalog, self.seed_default_roles)

    async def ensure_core_metrics(self, owner_id: Optional[str]) -> OperationResult:
        return await self._call(owner_id, self.catalog.ensure_core_metrics)

    async def list_roles(self, owner_id: Optional[str]) -> OperationResult:
        return await self._call(owner_id, self.catalog.list_roles)

    async def list_metrics(self, owner_id: Optional[str], role_id: int) -> OperationResult:
        return await self._call(owner_id, self.catalog.list_metrics, role_id)

    async def create_role(self, owner_id: Optional[str], name: Any) -> OperationResult:
        return await self._call(owner_id, self.catalog.create_role, name)

    async def delete_role(self, owner_id: Optional[str], role_id: int) -> OperationResult:
        return await self._call(owner_id, self.catalog.delete_role, role_id)

    async def create_metric(self, owner_id: Optional[str], role_id: int, data: Any) -> OperationResult:
        return await self._call(owner_id, self.catalog.create_metric, role_id, data)

    async def delete_metric(self, owner_id: Optional[str], metric_id: int) -> OperationResult:
        return await self._call(owner_id, self.catalog.delete_metric, metric_id)

    async def update_metric_goal(self, owner_id: Optional[str], metric_id: int, goal_value: Any) -> OperationResult:
        return await self._call(owner_id, self.catalog.update_metric_goal, metric_id, goal_value)

    async def update_metric_goals(self, owner_id: Optional[str], items: Sequence[Any]) -> OperationResult:
        return await self._call(owner_id, self.catalog.update_metric_goals, items)

    async def update_metric_visibilities(self, owner_id: Optional[str], items: Sequence[Any]) -> OperationResult:
        return await self._call(owner_id, self.catalog.update_metric_visibilities, items)

    # Weekly data

    async def save_weekly_data(
        self, owner_id: Optional[str], metric_id: int, week_number: int, year: int, actual_value: Any
    ) -> OperationResult:
        return await self._call(owner_id, self.weekly.save_weekly_data, metric_id, week_number, year, actual_value)

    async def save_weekly_data_batch(self, owner_id: Optional[str], points: Sequence[Any]) -> OperationResult:
        return await self._call(owner_id, self.weekly.save_weekly_data_batch, points)

    async def save_month_entries(
        self, owner_id: Optional[str], metric_id: int, month: int, year: int, values: Sequence[Any]
    ) -> OperationResult:
        return await self._call(owner_id, self.weekly.save_month_entries, metric_id, month, year, values)

    async def get_weekly_data(self, owner_id: Optional[str], metric_id: int, year: int) -> OperationResult:
        return await self._call(owner_id, self.weekly.get_weekly_data, metric_id, year)
