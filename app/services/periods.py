"""Synthetic calendar and month-level resolution of raw weekly entries.

A month is exactly four consecutive weeks, so month ``m`` covers weeks
``(m-1)*4+1 .. (m-1)*4+4`` and a year spans 48 weeks.
"""
from enum import Enum
from typing import List, Mapping, Optional, Tuple

from app.core.errors import ValidationError
from app.schemas.catalog import MetricType
from app.schemas.scorecard import PeriodType

WEEKS_PER_MONTH = 4
MONTHS_PER_YEAR = 12
MONTHS_PER_QUARTER = 3
WEEKS_PER_YEAR = WEEKS_PER_MONTH * MONTHS_PER_YEAR

MIN_YEAR = 1900
MAX_YEAR = 2100


class EntryShape(str, Enum):
    MONTHLY_ENTRY = "monthly_entry"
    WEEKLY_ENTRIES = "weekly_entries"
    NO_DATA = "no_data"


def month_start_week(month: int) -> int:
    return (month - 1) * WEEKS_PER_MONTH + 1


def month_of_week(week_number: int) -> int:
    return (week_number - 1) // WEEKS_PER_MONTH + 1


def month_week_range(month: int) -> Tuple[int, int]:
    start = month_start_week(month)
    return start, start + WEEKS_PER_MONTH - 1


def quarter_months(quarter: int) -> List[int]:
    first = (quarter - 1) * MONTHS_PER_QUARTER + 1
    return list(range(first, first + MONTHS_PER_QUARTER))


def period_months(period_type: PeriodType, period_value: Optional[int]) -> List[int]:
    if period_type == PeriodType.MONTH:
        return [period_value]
    if period_type == PeriodType.QUARTER:
        return quarter_months(period_value)
    return list(range(1, MONTHS_PER_YEAR + 1))


def span_week_range(months: List[int]) -> Tuple[int, int]:
    return month_week_range(min(months))[0], month_week_range(max(months))[1]


def validate_year(year: int) -> None:
    if not isinstance(year, int) or isinstance(year, bool) or not MIN_YEAR <= year <= MAX_YEAR:
        raise ValidationError(f"Invalid year: {year!r}")


def validate_period(period_type: PeriodType, period_value: Optional[int], year: int) -> None:
    validate_year(year)
    if period_type == PeriodType.YEAR:
        return
    upper = MONTHS_PER_YEAR if period_type == PeriodType.MONTH else MONTHS_PER_YEAR // MONTHS_PER_QUARTER
    if not isinstance(period_value, int) or isinstance(period_value, bool) or not 1 <= period_value <= upper:
        raise ValidationError(f"Invalid {period_type.value}: {period_value!r}")


def validate_week(week_number: int) -> None:
    if not isinstance(week_number, int) or isinstance(week_number, bool) or not 1 <= week_number <= WEEKS_PER_YEAR:
        raise ValidationError(f"Invalid week number: {week_number!r}")


def classify_month(weeks: Mapping[int, float], month: int) -> EntryShape:
    """Decide whether a month's stored rows are one monthly entry or weekly entries.

    ``weeks`` maps week number to value for rows that exist; an absent key
    means no row was stored, which is different from a stored zero.  A row
    in the first week with nothing but absent or zero rows after it reads
    as a single monthly entry.  One real weekly value followed by genuine
    zeros has the same shape, so the two cannot be told apart here.
    """
    start, end = month_week_range(month)
    if start in weeks and all(weeks.get(w, 0) == 0 for w in range(start + 1, end + 1)):
        return EntryShape.MONTHLY_ENTRY
    if any(w in weeks for w in range(start, end + 1)):
        return EntryShape.WEEKLY_ENTRIES
    return EntryShape.NO_DATA


def resolve_month_actual(
    weeks: Mapping[int, float], month: int, metric_type: MetricType
) -> Tuple[float, bool]:
    """Return ``(actual, has_data)`` for one metric over one month."""
    shape = classify_month(weeks, month)
    if shape == EntryShape.NO_DATA:
        return 0.0, False

    start, end = month_week_range(month)
    if shape == EntryShape.MONTHLY_ENTRY:
        return float(weeks[start]), True

    values = [float(weeks.get(w, 0.0)) for w in range(start, end + 1)]
    if metric_type.is_rating:
        return sum(values) / WEEKS_PER_MONTH, True
    return sum(values), True


def goal_multiplier(metric_type: MetricType, month_count: int) -> int:
    # A 1-5 rating goal is not additive across months
    return 1 if metric_type.is_rating else month_count
