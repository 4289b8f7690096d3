from pydantic import BaseModel, Field
from typing import List

class WeeklyDataPoint(BaseModel):
    metric_id: int
    week_number: int
    year: int
    actual_value: float

    model_config = {"frozen": True}

class MonthEntries(BaseModel):
    # Week 1-4 of the synthetic month, zeros included
    values: List[float] = Field(..., min_length=4, max_length=4)
