import math
from typing import Iterable

from app.schemas.scorecard import Grade

def percentage_of_goal(actual: float, goal: float, is_inverted: bool) -> float:
    """Actual as a percentage of goal; inverted metrics score goal/actual.

    No upper clamp: over-achievement above 100% is kept.  An inverted
    metric with a zero actual scores 0, the worst grade, even though zero
    time or zero errors is a perfect result.  Historical grades depend on
    this so it is left as is.
    """
    if goal == 0:
        return 0.0
    if is_inverted:
        if actual == 0:
            return 0.0
        return goal / actual * 100
    return actual / goal * 100

def calculate_grade(percentage: float) -> Grade:
    if percentage >= 90:
        return Grade.A
    if percentage >= 80:
        return Grade.B
    if percentage >= 70:
        return Grade.C
    if percentage >= 60:
        return Grade.D
    return Grade.F

def mean_percentage(percentages: Iterable[float]) -> float:
    """Unweighted mean ignoring NaN/inf; 0 when nothing is left."""
    finite = [p for p in percentages if math.isfinite(p)]
    if not finite:
        return 0.0
    return sum(finite) / len(finite)
