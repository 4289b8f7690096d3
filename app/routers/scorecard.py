from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.config import settings
from app.core.auth import get_current_owner
from app.database import AsyncSessionLocal
from app.schemas.catalog import GoalUpdate, GoalValue, MetricCreate, RoleCreate, VisibilityUpdate
from app.schemas.result import OperationResult
from app.schemas.scorecard import PeriodType
from app.schemas.weekly_data import MonthEntries, WeeklyDataPoint
from app.services.engine import ScorecardEngine
from app.store.sql import SqlScorecardStore

router = APIRouter(prefix="/scorecard", tags=["scorecard"])

STATUS_BY_CODE = {
    "not_authenticated": 401,
    "not_found": 404,
    "validation_error": 400,
    "persistence_error": 500,
}

def get_engine() -> ScorecardEngine:
    return ScorecardEngine(SqlScorecardStore(AsyncSessionLocal), seed_default_roles=settings.SEED_DEFAULT_ROLES)

def unwrap(result: OperationResult) -> OperationResult:
    # A partially applied batch is still a 200; the body lists the failed items
    if result.success or result.code == "partial_batch_failure":
        return result
    raise HTTPException(STATUS_BY_CODE.get(result.code, 500), result.error)

@router.get("")
async def get_scorecard(
    period_type: PeriodType = Query(PeriodType.MONTH),
    period: Optional[int] = Query(None),
    year: int = Query(...),
    recompute: bool = Query(False),
    engine: ScorecardEngine = Depends(get_engine),
    owner_id: str = Depends(get_current_owner)
):
    return unwrap(await engine.get_scorecard(owner_id, period_type, period, year, recompute))

@router.post("/summaries/{year}/{month}")
async def calculate_monthly_summary(
    year: int,
    month: int,
    engine: ScorecardEngine = Depends(get_engine),
    owner_id: str = Depends(get_current_owner)
):
    return unwrap(await engine.calculate_monthly_summary(owner_id, month, year))

@router.post("/initialize")
async def initialize_catalog(
    engine: ScorecardEngine = Depends(get_engine),
    owner_id: str = Depends(get_current_owner)
):
    return unwrap(await engine.initialize_catalog(owner_id))

# Roles

@router.get("/roles")
async def list_roles(
    engine: ScorecardEngine = Depends(get_engine),
    owner_id: str = Depends(get_current_owner)
):
    return unwrap(await engine.list_roles(owner_id))

@router.post("/roles")
async def create_role(
    role_in: RoleCreate,
    engine: ScorecardEngine = Depends(get_engine),
    owner_id: str = Depends(get_current_owner)
):
    return unwrap(await engine.create_role(owner_id, role_in.name))

@router.delete("/roles/{role_id}")
async def delete_role(
    role_id: int,
    engine: ScorecardEngine = Depends(get_engine),
    owner_id: str = Depends(get_current_owner)
):
    return unwrap(await engine.delete_role(owner_id, role_id))

# Metrics

@router.get("/roles/{role_id}/metrics")
async def list_metrics(
    role_id: int,
    engine: ScorecardEngine = Depends(get_engine),
    owner_id: str = Depends(get_current_owner)
):
    return unwrap(await engine.list_metrics(owner_id, role_id))

@router.post("/roles/{role_id}/metrics")
async def create_metric(
    role_id: int,
    metric_in: MetricCreate,
    engine: ScorecardEngine = Depends(get_engine),
    owner_id: str = Depends(get_current_owner)
):
    return unwrap(await engine.create_metric(owner_id, role_id, metric_in))

@router.delete("/metrics/{metric_id}")
async def delete_metric(
    metric_id: int,
    engine: ScorecardEngine = Depends(get_engine),
    owner_id: str = Depends(get_current_owner)
):
    return unwrap(await engine.delete_metric(owner_id, metric_id))

@router.put("/metrics/goals")
async def update_metric_goals(
    updates: List[GoalUpdate],
    engine: ScorecardEngine = Depends(get_engine),
    owner_id: str = Depends(get_current_owner)
):
    return unwrap(await engine.update_metric_goals(owner_id, updates))

@router.put("/metrics/visibility")
async def update_metric_visibilities(
    updates: List[VisibilityUpdate],
    engine: ScorecardEngine = Depends(get_engine),
    owner_id: str = Depends(get_current_owner)
):
    return unwrap(await engine.update_metric_visibilities(owner_id, updates))

@router.put("/metrics/{metric_id}/goal")
async def update_metric_goal(
    metric_id: int,
    goal_in: GoalValue,
    engine: ScorecardEngine = Depends(get_engine),
    owner_id: str = Depends(get_current_owner)
):
    return unwrap(await engine.update_metric_goal(owner_id, metric_id, goal_in.goal_value))

# Weekly data

@router.put("/weekly-data")
async def save_weekly_data_batch(
    points: List[WeeklyDataPoint],
    engine: ScorecardEngine = Depends(get_engine),
    owner_id: str = Depends(get_current_owner)
):
    return unwrap(await engine.save_weekly_data_batch(owner_id, points))

@router.put("/metrics/{metric_id}/months/{year}/{month}")
async def save_month_entries(
    metric_id: int,
    year: int,
    month: int,
    entries: MonthEntries,
    engine: ScorecardEngine = Depends(get_engine),
    owner_id: str = Depends(get_current_owner)
):
    return unwrap(await engine.save_month_entries(owner_id, metric_id, month, year, entries.values))

@router.get("/metrics/{metric_id}/weekly-data")
async def get_weekly_data(
    metric_id: int,
    year: int = Query(...),
    engine: ScorecardEngine = Depends(get_engine),
    owner_id: str = Depends(get_current_owner)
):
    return unwrap(await engine.get_weekly_data(owner_id, metric_id, year))
