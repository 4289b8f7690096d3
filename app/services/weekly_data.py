import math
from typing import Any, List, Sequence

from pydantic import ValidationError as SchemaError

from app.core.errors import ValidationError
from app.schemas.scorecard import PeriodType
from app.schemas.weekly_data import WeeklyDataPoint
from app.services.batch import run_batch
from app.services.catalog import CatalogService
from app.services.periods import (
    WEEKS_PER_MONTH,
    WEEKS_PER_YEAR,
    month_of_week,
    month_start_week,
    validate_period,
    validate_week,
    validate_year,
)
from app.store.base import ScorecardStore

def validate_actual(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"Actual value must be a number, got {value!r}")
    if not math.isfinite(value) or value < 0:
        raise ValidationError("Actual value must be zero or greater")
    return float(value)

class WeeklyDataService:

    def __init__(self, store: ScorecardStore, catalog: CatalogService):
        self.store = store
        self.catalog = catalog

    async def save_weekly_data(
        self, owner_id: str, metric_id: int, week_number: int, year: int, actual_value: Any
    ) -> WeeklyDataPoint:
        validate_week(week_number)
        validate_year(year)
        point = WeeklyDataPoint(
            metric_id=metric_id,
            week_number=week_number,
            year=year,
            actual_value=validate_actual(actual_value),
        )
        metric = await self.catalog.get_owned_metric(owner_id, metric_id)
        await self.store.upsert_weekly_data(point)
        # The stored month summary no longer reflects this week
        await self.store.delete_monthly_summary(metric.role_id, month_of_week(week_number), year)
        return point

    async def save_weekly_data_batch(self, owner_id: str, points: Sequence[Any]) -> int:
        async def apply(item: Any) -> None:
            if not isinstance(item, WeeklyDataPoint):
                try:
                    item = WeeklyDataPoint.model_validate(item)
                except SchemaError as exc:
                    raise ValidationError(str(exc)) from exc
            await self.save_weekly_data(owner_id, item.metric_id, item.week_number, item.year, item.actual_value)

        return await run_batch("save_weekly_data_batch", points, apply)

    async def save_month_entries(
        self, owner_id: str, metric_id: int, month: int, year: int, values: Sequence[Any]
    ) -> int:
        """Write all four weeks of a month, zeros included."""
        validate_period(PeriodType.MONTH, month, year)
        if len(values) != WEEKS_PER_MONTH:
            raise ValidationError(f"Expected {WEEKS_PER_MONTH} weekly values, got {len(values)}")
        await self.catalog.get_owned_metric(owner_id, metric_id)

        start = month_start_week(month)
        points = [
            {"metric_id": metric_id, "week_number": start + offset, "year": year, "actual_value": value}
            for offset, value in enumerate(values)
        ]
        return await self.save_weekly_data_batch(owner_id, points)

    async def get_weekly_data(self, owner_id: str, metric_id: int, year: int) -> List[WeeklyDataPoint]:
        validate_year(year)
        await self.catalog.get_owned_metric(owner_id, metric_id)
        return await self.store.get_weekly_data([metric_id], year, (1, WEEKS_PER_YEAR))
