from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, UniqueConstraint, func
from app.database import Base

class WeeklyDataRecord(Base):
    __tablename__ = "scorecard_weekly_data"

    id = Column(Integer, primary_key=True, index=True)
    metric_id = Column(Integer, ForeignKey("scorecard_metrics.id", ondelete="CASCADE"), nullable=False, index=True)
    week_number = Column(Integer, nullable=False)  # 1-48, four per synthetic month
    year = Column(Integer, nullable=False)
    actual_value = Column(Float, nullable=False, default=0.0)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("metric_id", "week_number", "year", name="uq_metric_week_year"),
    )
