from typing import Dict, List

from app.schemas.catalog import MetricSpec, MetricType

# Present on every role; scored as their own pool
CORE_BEHAVIOR_METRICS: List[MetricSpec] = [
    MetricSpec(name=name, metric_type=MetricType.RATING_1_5, goal_value=5)
    for name in ("Effort", "Attitude", "Teamwork", "Innovation", "Results")
]

CORE_BEHAVIOR_METRIC_NAMES = frozenset(m.name for m in CORE_BEHAVIOR_METRICS)


def is_core_behavior_metric(name: str) -> bool:
    return name in CORE_BEHAVIOR_METRIC_NAMES


def _rating(name: str) -> MetricSpec:
    return MetricSpec(name=name, metric_type=MetricType.RATING_1_5, goal_value=5)


# Starter roles created by initialize_catalog; core behavior metrics are appended after these
ROLE_TEMPLATES: Dict[str, List[MetricSpec]] = {
    "Marketing Position": [
        MetricSpec(name="Seminar Calls", metric_type=MetricType.COUNT, goal_value=300),
        MetricSpec(name="Sales Calls", metric_type=MetricType.COUNT, goal_value=400),
        MetricSpec(name="Care Bear Calls", metric_type=MetricType.COUNT, goal_value=80),
        MetricSpec(name="Social Media Posts", metric_type=MetricType.COUNT, goal_value=12),
        MetricSpec(name="Emails Sent to Prospects", metric_type=MetricType.COUNT, goal_value=15),
        MetricSpec(name="Emails Sent Existing", metric_type=MetricType.COUNT, goal_value=15),
        MetricSpec(name="Appointments Booked", metric_type=MetricType.COUNT, goal_value=24),
        MetricSpec(name="Appointments Attended", metric_type=MetricType.COUNT, goal_value=20),
    ],
    "Client Coordinator": [
        MetricSpec(name="Annuity Processing Time", metric_type=MetricType.DURATION, goal_value=30, is_inverted=True),
        MetricSpec(name="Life Processing Time", metric_type=MetricType.DURATION, goal_value=60, is_inverted=True),
        MetricSpec(name="AUM Processing Time", metric_type=MetricType.DURATION, goal_value=30, is_inverted=True),
        MetricSpec(name="Error Rate", metric_type=MetricType.PERCENTAGE, goal_value=10, is_inverted=True),
        _rating("Feedback Rate"),
        _rating("Client Response Time"),
        _rating("Note Accuracy"),
        _rating("Client Satisfaction"),
    ],
    "Office Manager": [
        _rating("Project Management"),
        _rating("Budget Management"),
        _rating("Compliance"),
        _rating("Employee Satisfaction"),
        _rating("Office Communication"),
        _rating("Innovation and Improvement"),
        _rating("Employee Tracking"),
        _rating("Conflict Resolution"),
    ],
    "Business Owner": [
        MetricSpec(name="Cash On Hand", metric_type=MetricType.CURRENCY, goal_value=150000),
        MetricSpec(name="Pending Cash Flow", metric_type=MetricType.CURRENCY, goal_value=100000),
        MetricSpec(name="Marketing Events", metric_type=MetricType.COUNT, goal_value=4),
        MetricSpec(name="Revenue Gen Appointments", metric_type=MetricType.COUNT, goal_value=24),
        MetricSpec(name="Rev Gen Appts Converted", metric_type=MetricType.COUNT, goal_value=18),
        MetricSpec(name="Pending Annuity", metric_type=MetricType.CURRENCY, goal_value=1000000),
        MetricSpec(name="Pending Life", metric_type=MetricType.CURRENCY, goal_value=100000),
        MetricSpec(name="Pending AUM", metric_type=MetricType.CURRENCY, goal_value=1250000),
    ],
}
