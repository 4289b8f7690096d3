from typing import Iterable, List, Optional

from app.schemas.catalog import Role
from app.schemas.scorecard import CompanySummary, MetricScore, RoleScorecard
from app.services.defaults import is_core_behavior_metric
from app.services.grading import calculate_grade, mean_percentage

def compose_role_scorecard(role: Role, scores: List[MetricScore]) -> RoleScorecard:
    """Split a role's scores into core behavior and custom pools.

    The combined average runs over every percentage of both pools, so it is
    not the mean of the two pool averages when the pools differ in size.
    """
    default_metrics = [s for s in scores if is_core_behavior_metric(s.metric_name)]
    user_metrics = [s for s in scores if not is_core_behavior_metric(s.metric_name)]

    default_average = mean_percentage(s.percentage_of_goal for s in default_metrics)
    user_average = mean_percentage(s.percentage_of_goal for s in user_metrics)
    combined_average = mean_percentage(
        [s.percentage_of_goal for s in default_metrics] + [s.percentage_of_goal for s in user_metrics]
    )
    average = mean_percentage(s.percentage_of_goal for s in scores)

    return RoleScorecard(
        role_id=role.id,
        role_name=role.name,
        metrics=list(scores),
        average_grade_percentage=average,
        average_grade=calculate_grade(average),
        default_metrics=default_metrics,
        default_metrics_average=default_average,
        default_metrics_grade=calculate_grade(default_average),
        user_metrics=user_metrics,
        user_metrics_average=user_average,
        user_metrics_grade=calculate_grade(user_average),
        combined_average=combined_average,
        combined_grade=calculate_grade(combined_average),
    )

def compose_company_summary(
    owner_id: str,
    year: int,
    scorecards: Iterable[RoleScorecard],
    month: Optional[int] = None,
    quarter: Optional[int] = None,
) -> CompanySummary:
    # Roles without metrics are left out rather than counted as 0
    averages = [sc.average_grade_percentage for sc in scorecards if sc.metrics]
    company_average = mean_percentage(averages)
    return CompanySummary(
        owner_id=owner_id,
        year=year,
        month=month,
        quarter=quarter,
        company_average=company_average,
        company_grade=calculate_grade(company_average),
    )
