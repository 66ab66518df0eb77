from __future__ import annotations

import calendar
from datetime import UTC, date, datetime

from dateutil.relativedelta import relativedelta


def utc_now() -> datetime:
    return datetime.now(UTC)


def utc_now_naive() -> datetime:
    return utc_now().replace(tzinfo=None)


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_bounds(value: date) -> tuple[date, date]:
    """Return the first day of ``value``'s month and of the following month."""
    month_start = value.replace(day=1)
    return month_start, month_start + relativedelta(months=1)
