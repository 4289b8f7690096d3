import logging
from typing import Any, Optional

from app.core.errors import ValidationError
from app.schemas.scorecard import PeriodType, ScorecardSnapshot
from app.services.aggregator import PeriodAggregator
from app.services.catalog import CatalogService
from app.services.composer import compose_company_summary, compose_role_scorecard
from app.services.periods import validate_period
from app.store.base import ScorecardStore

logger = logging.getLogger(__name__)

def parse_period_type(period_type: Any) -> PeriodType:
    try:
        return PeriodType(period_type)
    except ValueError:
        raise ValidationError(f"Invalid period type: {period_type!r}")

class ScorecardService:

    def __init__(self, store: ScorecardStore, catalog: CatalogService, aggregator: PeriodAggregator):
        self.store = store
        self.catalog = catalog
        self.aggregator = aggregator

    async def get_scorecard(
        self,
        owner_id: str,
        period_type: Any,
        period_value: Optional[int],
        year: int,
        recompute: bool = False,
    ) -> ScorecardSnapshot:
        period_type = parse_period_type(period_type)
        if period_type == PeriodType.YEAR:
            period_value = None
        validate_period(period_type, period_value, year)

        catalog = await self.catalog.load_healed(owner_id)

        if period_type == PeriodType.MONTH:
            return await self._month(owner_id, catalog, period_value, year, recompute)

        role_scores = await self.aggregator.aggregate_span(catalog, period_type, period_value, year)
        scorecards = [compose_role_scorecard(role, scores) for role, scores in role_scores]
        company = compose_company_summary(
            owner_id,
            year,
            scorecards,
            quarter=period_value if period_type == PeriodType.QUARTER else None,
        )
        return ScorecardSnapshot(
            period_type=period_type,
            period_value=period_value,
            year=year,
            role_scorecards=scorecards,
            company_summary=company,
        )

    async def calculate_monthly_summary(self, owner_id: str, month: int, year: int) -> ScorecardSnapshot:
        return await self.get_scorecard(owner_id, PeriodType.MONTH, month, year, recompute=True)

    async def _month(self, owner_id, catalog, month, year, recompute) -> ScorecardSnapshot:
        role_scores, recomputed = await self.aggregator.aggregate_month(catalog, month, year, recompute)
        scorecards = [compose_role_scorecard(role, scores) for role, scores in role_scores]
        company = compose_company_summary(owner_id, year, scorecards, month=month)

        # The company row only changes when a role summary does
        if recomputed or await self.store.get_company_summary(owner_id, month, year) is None:
            await self.store.upsert_company_summary(company)
            logger.info("Company summary %d/%d for owner %s: %.1f%%", month, year, owner_id, company.company_average)

        return ScorecardSnapshot(
            period_type=PeriodType.MONTH,
            period_value=month,
            year=year,
            role_scorecards=scorecards,
            company_summary=company,
        )
