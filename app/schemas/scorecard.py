from enum import Enum
from pydantic import BaseModel
from typing import List, Optional

from app.schemas.catalog import MetricType

class Grade(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"

class PeriodType(str, Enum):
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"

class MetricScore(BaseModel):
    metric_id: int
    metric_name: str
    metric_type: MetricType
    goal_value: float  # scaled to the period
    actual_value: float  # aggregated over the period
    percentage_of_goal: float
    grade: Grade

    model_config = {"frozen": True}

class MonthlySummary(BaseModel):
    role_id: int
    month: int
    year: int
    average_grade_percentage: float
    average_grade: Grade
    metric_scores: List[MetricScore]

    model_config = {"frozen": True}

class CompanySummary(BaseModel):
    owner_id: str
    year: int
    month: Optional[int] = None
    quarter: Optional[int] = None
    company_average: float
    company_grade: Grade

    model_config = {"frozen": True}

class RoleScorecard(BaseModel):
    role_id: int
    role_name: str
    metrics: List[MetricScore]
    average_grade_percentage: float
    average_grade: Grade
    default_metrics: List[MetricScore]
    default_metrics_average: float
    default_metrics_grade: Grade
    user_metrics: List[MetricScore]
    user_metrics_average: float
    user_metrics_grade: Grade
    combined_average: float
    combined_grade: Grade

    model_config = {"frozen": True}

class ScorecardSnapshot(BaseModel):
    period_type: PeriodType
    period_value: Optional[int]
    year: int
    role_scorecards: List[RoleScorecard]
    company_summary: CompanySummary

    model_config = {"frozen": True}
