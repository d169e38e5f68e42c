"""
Shared utility helpers.
"""

from klass_hero.utils.date_utils import (
    DateUtilsError,
    age_in_months,
    month_bounds,
    month_range,
    month_start,
    now_utc,
    to_utc,
    today_local,
)

__all__ = [
    "DateUtilsError",
    "age_in_months",
    "month_bounds",
    "month_range",
    "month_start",
    "now_utc",
    "to_utc",
    "today_local",
]
