from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, UniqueConstraint, func
from app.database import Base

class MonthlySummaryRecord(Base):
    __tablename__ = "scorecard_monthly_summaries"

    id = Column(Integer, primary_key=True, index=True)
    role_id = Column(Integer, ForeignKey("scorecard_roles.id", ondelete="CASCADE"), nullable=False, index=True)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    average_grade_percentage = Column(Float, nullable=False, default=0.0)
    average_grade_letter = Column(String(1), nullable=False, default="F")
    computed_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("role_id", "month", "year", name="uq_role_month_year"),
    )

class MetricScoreRecord(Base):
    __tablename__ = "scorecard_metric_scores"

    id = Column(Integer, primary_key=True, index=True)
    monthly_summary_id = Column(
        Integer, ForeignKey("scorecard_monthly_summaries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    metric_id = Column(Integer, ForeignKey("scorecard_metrics.id", ondelete="CASCADE"), nullable=False)
    # Name and type are snapshotted so a summary reads back without a catalog join
    metric_name = Column(String, nullable=False)
    metric_type = Column(String, nullable=False)
    actual_value = Column(Float, nullable=False, default=0.0)
    goal_value = Column(Float, nullable=False, default=0.0)
    percentage_of_goal = Column(Float, nullable=False, default=0.0)
    grade_letter = Column(String(1), nullable=False, default="F")
    position = Column(Integer, nullable=False, default=0)

class CompanySummaryRecord(Base):
    __tablename__ = "company_summaries"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String, nullable=False, index=True)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    company_average = Column(Float, nullable=False, default=0.0)
    company_grade = Column(String(1), nullable=False, default="F")
    computed_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("owner_id", "month", "year", name="uq_owner_month_year"),
    )
