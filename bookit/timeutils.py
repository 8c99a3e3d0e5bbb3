"""Wall-clock helpers.

Booking windows and opening hours are compared as naive datetimes in the
tenant wall-clock zone configured by ``settings.timezone``.
"""

import calendar
from datetime import datetime
from zoneinfo import ZoneInfo

from bookit.config import settings


def _zone() -> ZoneInfo:
    return ZoneInfo(settings.timezone)


def to_local_naive(value: datetime | None) -> datetime | None:
    """Convert an aware datetime to naive wall-clock time; naive values pass through."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(_zone()).replace(tzinfo=None)


def local_now() -> datetime:
    return datetime.now(_zone()).replace(tzinfo=None)


def add_months(value: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)
