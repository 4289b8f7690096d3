from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey, UniqueConstraint, func
from app.database import Base

class ScorecardRole(Base):
    __tablename__ = "scorecard_roles"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String, nullable=False, index=True)
    role_name = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("owner_id", "role_name", name="uq_owner_role_name"),
    )

class ScorecardMetric(Base):
    __tablename__ = "scorecard_metrics"

    id = Column(Integer, primary_key=True, index=True)
    role_id = Column(Integer, ForeignKey("scorecard_roles.id", ondelete="CASCADE"), nullable=False, index=True)
    metric_name = Column(String, nullable=False)
    metric_type = Column(String, nullable=False)  # count, currency, percentage, duration, rating_1_5, rating_scale
    goal_value = Column(Float, nullable=False, default=0.0)
    is_inverted = Column(Boolean, nullable=False, default=False)
    display_order = Column(Integer, nullable=False, default=0)
    is_visible = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("role_id", "metric_name", name="uq_role_metric_name"),
    )
