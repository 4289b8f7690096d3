from enum import Enum
from pydantic import BaseModel, Field

class MetricType(str, Enum):
    COUNT = "count"
    CURRENCY = "currency"
    PERCENTAGE = "percentage"
    DURATION = "duration"
    RATING_1_5 = "rating_1_5"
    RATING_SCALE = "rating_scale"

    @property
    def is_rating(self) -> bool:
        # 1-5 ratings are averaged, never summed, across weeks and months
        return self in (MetricType.RATING_1_5, MetricType.RATING_SCALE)

class Role(BaseModel):
    id: int
    owner_id: str
    name: str

    model_config = {"frozen": True}

class Metric(BaseModel):
    id: int
    role_id: int
    name: str
    metric_type: MetricType
    goal_value: float
    is_inverted: bool = False
    display_order: int = 0
    is_visible: bool = True

    model_config = {"frozen": True}

class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)

class MetricCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    metric_type: MetricType
    goal_value: float
    is_inverted: bool = False
    is_visible: bool = True

class GoalUpdate(BaseModel):
    metric_id: int
    goal_value: float

class GoalValue(BaseModel):
    goal_value: float

class VisibilityUpdate(BaseModel):
    metric_id: int
    is_visible: bool

class MetricSpec(BaseModel):
    """A metric definition that is not yet bound to a stored role."""
    name: str
    metric_type: MetricType
    goal_value: float
    is_inverted: bool = False
