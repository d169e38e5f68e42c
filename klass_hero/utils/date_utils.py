# klass_hero/utils/date_utils.py
"""
Date and time utility functions used across the project.

Notes:
- All "UTC" helpers return timezone-aware datetimes in `pytz.UTC`.
- Business dates (registration windows, "today", eligibility ages) are
  evaluated in the configured local timezone (`settings.TIMEZONE`).
"""

import logging
from calendar import monthrange as _monthrange
from datetime import date, datetime, time, tzinfo
from typing import Optional, Tuple

import pytz
from dateutil.relativedelta import relativedelta

from klass_hero.config.settings import settings

logger = logging.getLogger(__name__)

UTC = pytz.UTC


class DateUtilsError(Exception):
    """Custom exception for date utilities errors."""
    pass


def now_utc() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(UTC)


def local_timezone(name: Optional[str] = None) -> tzinfo:
    """Return the configured business timezone."""
    tz_name = name or settings.TIMEZONE
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError as e:
        logger.error(f"Unknown timezone configured: {tz_name}")
        raise DateUtilsError(f"Unknown timezone: {tz_name}") from e


def today_local(tz_name: Optional[str] = None) -> date:
    """Return today's date in the business timezone."""
    return datetime.now(local_timezone(tz_name)).date()


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    - If naive, assumes it's already in UTC and only attaches tzinfo.
    - If aware, converts to UTC.
    """
    if not isinstance(dt, datetime):
        raise DateUtilsError("Input must be a datetime object")
    if dt.tzinfo is None:
        return UTC.localize(dt)
    return dt.astimezone(UTC)


def month_start(d: date) -> date:
    """Return the first day of the month containing `d`."""
    return d.replace(day=1)


def month_range(year: int, month: int) -> Tuple[date, date]:
    """Return (first_day, last_day) of a given month."""
    if not (1 <= month <= 12):
        raise DateUtilsError("Month must be between 1 and 12")

    if not (1 <= year <= 9999):
        raise DateUtilsError("Year must be between 1 and 9999")

    first = date(year, month, 1)
    last = date(year, month, _monthrange(year, month)[1])
    return first, last


def month_bounds(d: date) -> Tuple[datetime, datetime]:
    """
    Return the half-open UTC datetime interval [start, end) covering the
    calendar month that contains `d`.
    """
    first = month_start(d)
    start = UTC.localize(datetime.combine(first, time.min))
    return start, start + relativedelta(months=1)


def age_in_months(birth_date: date, as_of: date) -> int:
    """Whole months lived between `birth_date` and `as_of`; 0 before birth."""
    delta = relativedelta(as_of, birth_date)
    return max(delta.years * 12 + delta.months, 0)
