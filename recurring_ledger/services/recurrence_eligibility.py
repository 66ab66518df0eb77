from __future__ import annotations

from datetime import date

from sqlalchemy import or_
from sqlalchemy.sql.elements import ColumnElement

from recurring_ledger.models.recurring_transaction import RecurringTransaction
from recurring_ledger.utils.datetime_utils import month_bounds


def build_eligibility_criteria(today: date) -> list[ColumnElement[bool]]:
    """Filters selecting templates that may owe a transaction on ``today``.

    The criteria are deliberately permissive: a template whose watermark sits
    in an earlier month is selected even before its day of month has come, and
    the due-month enumeration decides what is actually owed.
    """
    month_start, next_month_start = month_bounds(today)
    last_processed = RecurringTransaction.last_processed
    never_processed = last_processed.is_(None)
    processed_before_this_month = last_processed < month_start

    return [
        RecurringTransaction.is_active.is_(True),
        or_(
            RecurringTransaction.end_date.is_(None),
            RecurringTransaction.end_date >= today,
        ),
        or_(
            never_processed,
            processed_before_this_month,
            last_processed >= next_month_start,
        ),
        or_(
            never_processed,
            RecurringTransaction.day_of_month <= today.day,
            processed_before_this_month,
        ),
    ]
