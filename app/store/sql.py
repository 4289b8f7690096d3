"""SQLAlchemy implementation of the scorecard store.

Every port call opens its own session and runs in a single transaction,
so calls issued concurrently by the batch operations never share a
session.  Driver errors are converted to ``PersistenceError``.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional, Sequence

from sqlalchemy import select, delete, update, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.errors import PersistenceError
from app.models.catalog import ScorecardRole, ScorecardMetric
from app.models.summary import MonthlySummaryRecord, MetricScoreRecord, CompanySummaryRecord
from app.models.weekly_data import WeeklyDataRecord
from app.schemas.catalog import Metric, MetricType, Role
from app.schemas.scorecard import CompanySummary, Grade, MetricScore, MonthlySummary
from app.schemas.weekly_data import WeeklyDataPoint
from app.store.base import WeekRange

logger = logging.getLogger(__name__)


def _role(record: ScorecardRole) -> Role:
    return Role(id=record.id, owner_id=record.owner_id, name=record.role_name)


def _metric(record: ScorecardMetric) -> Metric:
    return Metric(
        id=record.id,
        role_id=record.role_id,
        name=record.metric_name,
        metric_type=MetricType(record.metric_type),
        goal_value=float(record.goal_value),
        is_inverted=bool(record.is_inverted),
        display_order=record.display_order,
        is_visible=True if record.is_visible is None else bool(record.is_visible),
    )


def _score(record: MetricScoreRecord) -> MetricScore:
    return MetricScore(
        metric_id=record.metric_id,
        metric_name=record.metric_name,
        metric_type=MetricType(record.metric_type),
        goal_value=float(record.goal_value),
        actual_value=float(record.actual_value),
        percentage_of_goal=float(record.percentage_of_goal),
        grade=Grade(record.grade_letter),
    )


def _upsert(db: AsyncSession, model, keys: Sequence[str], values: dict):
    """INSERT ... ON CONFLICT DO UPDATE on the unique key, last writer wins."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        insert = postgresql.insert
    elif dialect == "sqlite":
        insert = sqlite.insert
    else:
        raise PersistenceError(f"upsert not supported on {dialect}")
    stmt = insert(model).values(**values)
    changed = {k: stmt.excluded[k] for k in values if k not in keys}
    return stmt.on_conflict_do_update(index_elements=list(keys), set_=changed)


def _summary(record: MonthlySummaryRecord, scores: List[MetricScoreRecord]) -> MonthlySummary:
    return MonthlySummary(
        role_id=record.role_id,
        month=record.month,
        year=record.year,
        average_grade_percentage=float(record.average_grade_percentage),
        average_grade=Grade(record.average_grade_letter),
        metric_scores=[_score(s) for s in scores],
    )


class SqlScorecardStore:

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._sessions = session_factory

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._sessions() as session:
                async with session.begin():
                    yield session
        except SQLAlchemyError as exc:
            logger.exception("Scorecard store call failed")
            raise PersistenceError(str(getattr(exc, "orig", exc))) from exc

    # Catalog

    async def get_roles(self, owner_id: str) -> List[Role]:
        async with self._transaction() as db:
            result = await db.execute(
                select(ScorecardRole)
                .where(ScorecardRole.owner_id == owner_id)
                .order_by(ScorecardRole.role_name, ScorecardRole.id)
            )
            return [_role(r) for r in result.scalars()]

    async def get_role(self, role_id: int) -> Optional[Role]:
        async with self._transaction() as db:
            record = await db.get(ScorecardRole, role_id)
            return _role(record) if record else None

    async def create_role(self, owner_id: str, name: str) -> Role:
        async with self._transaction() as db:
            record = ScorecardRole(owner_id=owner_id, role_name=name)
            db.add(record)
            await db.flush()
            return _role(record)

    async def delete_role(self, role_id: int) -> None:
        async with self._transaction() as db:
            metric_ids = select(ScorecardMetric.id).where(ScorecardMetric.role_id == role_id)
            summary_ids = select(MonthlySummaryRecord.id).where(MonthlySummaryRecord.role_id == role_id)
            await db.execute(delete(MetricScoreRecord).where(MetricScoreRecord.monthly_summary_id.in_(summary_ids)))
            await db.execute(delete(MonthlySummaryRecord).where(MonthlySummaryRecord.role_id == role_id))
            await db.execute(delete(WeeklyDataRecord).where(WeeklyDataRecord.metric_id.in_(metric_ids)))
            await db.execute(delete(ScorecardMetric).where(ScorecardMetric.role_id == role_id))
            await db.execute(delete(ScorecardRole).where(ScorecardRole.id == role_id))

    async def get_metrics(self, role_ids: Sequence[int]) -> List[Metric]:
        if not role_ids:
            return []
        async with self._transaction() as db:
            result = await db.execute(
                select(ScorecardMetric)
                .where(ScorecardMetric.role_id.in_(list(role_ids)))
                .order_by(ScorecardMetric.role_id, ScorecardMetric.display_order, ScorecardMetric.id)
            )
            return [_metric(m) for m in result.scalars()]

    async def get_metric(self, metric_id: int) -> Optional[Metric]:
        async with self._transaction() as db:
            record = await db.get(ScorecardMetric, metric_id)
            return _metric(record) if record else None

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
        async with self._transaction() as db:
            record = ScorecardMetric(
                role_id=role_id,
                metric_name=name,
                metric_type=MetricType(metric_type).value,
                goal_value=goal_value,
                is_inverted=is_inverted,
                display_order=display_order,
                is_visible=is_visible,
            )
            db.add(record)
            await db.flush()
            return _metric(record)

    async def delete_metric(self, metric_id: int) -> None:
        async with self._transaction() as db:
            await db.execute(delete(MetricScoreRecord).where(MetricScoreRecord.metric_id == metric_id))
            await db.execute(delete(WeeklyDataRecord).where(WeeklyDataRecord.metric_id == metric_id))
            await db.execute(delete(ScorecardMetric).where(ScorecardMetric.id == metric_id))

    async def upsert_metric_goal(self, metric_id: int, goal_value: float) -> None:
        async with self._transaction() as db:
            result = await db.execute(
                update(ScorecardMetric)
                .where(ScorecardMetric.id == metric_id)
                .values(goal_value=goal_value)
            )
            if result.rowcount == 0:
                raise PersistenceError(f"metric {metric_id} does not exist")

    async def set_metric_visibility(self, metric_id: int, is_visible: bool) -> None:
        async with self._transaction() as db:
            result = await db.execute(
                update(ScorecardMetric)
                .where(ScorecardMetric.id == metric_id)
                .values(is_visible=is_visible)
            )
            if result.rowcount == 0:
                raise PersistenceError(f"metric {metric_id} does not exist")

    # Raw weekly series

    async def get_weekly_data(
        self, metric_ids: Sequence[int], year: int, week_range: WeekRange
    ) -> List[WeeklyDataPoint]:
        if not metric_ids:
            return []
        first, last = week_range
        async with self._transaction() as db:
            result = await db.execute(
                select(WeeklyDataRecord)
                .where(WeeklyDataRecord.metric_id.in_(list(metric_ids)))
                .where(WeeklyDataRecord.year == year)
                .where(WeeklyDataRecord.week_number >= first)
                .where(WeeklyDataRecord.week_number <= last)
                .order_by(WeeklyDataRecord.metric_id, WeeklyDataRecord.week_number)
            )
            return [
                WeeklyDataPoint(
                    metric_id=r.metric_id,
                    week_number=r.week_number,
                    year=r.year,
                    actual_value=float(r.actual_value),
                )
                for r in result.scalars()
            ]

    async def upsert_weekly_data(self, point: WeeklyDataPoint) -> None:
        async with self._transaction() as db:
            await db.execute(_upsert(db, WeeklyDataRecord, ("metric_id", "week_number", "year"), {
                "metric_id": point.metric_id,
                "week_number": point.week_number,
                "year": point.year,
                "actual_value": point.actual_value,
                "updated_at": func.now(),
            }))

    # Derived summaries

    async def get_monthly_summaries(
        self, role_ids: Sequence[int], month: int, year: int
    ) -> List[MonthlySummary]:
        if not role_ids:
            return []
        async with self._transaction() as db:
            result = await db.execute(
                select(MonthlySummaryRecord)
                .where(MonthlySummaryRecord.role_id.in_(list(role_ids)))
                .where(MonthlySummaryRecord.month == month)
                .where(MonthlySummaryRecord.year == year)
            )
            summaries = result.scalars().all()
            if not summaries:
                return []

            scores = await db.execute(
                select(MetricScoreRecord)
                .where(MetricScoreRecord.monthly_summary_id.in_([s.id for s in summaries]))
                .order_by(MetricScoreRecord.monthly_summary_id, MetricScoreRecord.position)
            )
            scores_by_summary: Dict[int, List[MetricScoreRecord]] = {}
            for score in scores.scalars():
                scores_by_summary.setdefault(score.monthly_summary_id, []).append(score)

            return [_summary(s, scores_by_summary.get(s.id, [])) for s in summaries]

    async def get_monthly_summary(self, role_id: int, month: int, year: int) -> Optional[MonthlySummary]:
        summaries = await self.get_monthly_summaries([role_id], month, year)
        return summaries[0] if summaries else None

    async def replace_monthly_summary(self, summary: MonthlySummary) -> None:
        # Header upsert, score delete and score insert commit together.
        # The upserted header row stays locked until commit.
        async with self._transaction() as db:
            await db.execute(_upsert(db, MonthlySummaryRecord, ("role_id", "month", "year"), {
                "role_id": summary.role_id,
                "month": summary.month,
                "year": summary.year,
                "average_grade_percentage": summary.average_grade_percentage,
                "average_grade_letter": summary.average_grade.value,
                "computed_at": func.now(),
            }))
            summary_id = (await db.execute(
                select(MonthlySummaryRecord.id)
                .where(MonthlySummaryRecord.role_id == summary.role_id)
                .where(MonthlySummaryRecord.month == summary.month)
                .where(MonthlySummaryRecord.year == summary.year)
            )).scalar_one()

            await db.execute(delete(MetricScoreRecord).where(MetricScoreRecord.monthly_summary_id == summary_id))
            db.add_all([
                MetricScoreRecord(
                    monthly_summary_id=summary_id,
                    metric_id=score.metric_id,
                    metric_name=score.metric_name,
                    metric_type=score.metric_type.value,
                    actual_value=score.actual_value,
                    goal_value=score.goal_value,
                    percentage_of_goal=score.percentage_of_goal,
                    grade_letter=score.grade.value,
                    position=position,
                )
                for position, score in enumerate(summary.metric_scores)
            ])

    async def delete_monthly_summary(self, role_id: int, month: int, year: int) -> None:
        async with self._transaction() as db:
            summary_ids = (
                select(MonthlySummaryRecord.id)
                .where(MonthlySummaryRecord.role_id == role_id)
                .where(MonthlySummaryRecord.month == month)
                .where(MonthlySummaryRecord.year == year)
            )
            await db.execute(delete(MetricScoreRecord).where(MetricScoreRecord.monthly_summary_id.in_(summary_ids)))
            await db.execute(
                delete(MonthlySummaryRecord)
                .where(MonthlySummaryRecord.role_id == role_id)
                .where(MonthlySummaryRecord.month == month)
                .where(MonthlySummaryRecord.year == year)
            )

    async def get_company_summary(self, owner_id: str, month: int, year: int) -> Optional[CompanySummary]:
        async with self._transaction() as db:
            result = await db.execute(
                select(CompanySummaryRecord)
                .where(CompanySummaryRecord.owner_id == owner_id)
                .where(CompanySummaryRecord.month == month)
                .where(CompanySummaryRecord.year == year)
            )
            record = result.scalar_one_or_none()
            if record is None:
                return None
            return CompanySummary(
                owner_id=record.owner_id,
                month=record.month,
                year=record.year,
                company_average=float(record.company_average),
                company_grade=Grade(record.company_grade),
            )

    async def upsert_company_summary(self, summary: CompanySummary) -> None:
        if summary.month is None:
            raise PersistenceError("company summaries are stored per month")
        async with self._transaction() as db:
            await db.execute(_upsert(db, CompanySummaryRecord, ("owner_id", "month", "year"), {
                "owner_id": summary.owner_id,
                "month": summary.month,
                "year": summary.year,
                "company_average": summary.company_average,
                "company_grade": summary.company_grade.value,
                "computed_at": func.now(),
            }))
