from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterator

from flask import current_app

from recurring_ledger.services.recurrence_store import (
    RecurrenceStore,
    RecurringTemplateSnapshot,
)
from recurring_ledger.utils.datetime_utils import last_day_of_month


@dataclass(frozen=True, order=True)
class DueMonth:
    year: int
    month: int

    @classmethod
    def of(cls, value: date) -> "DueMonth":
        return cls(year=value.year, month=value.month)

    def next(self) -> "DueMonth":
        if self.month == 12:
            return DueMonth(year=self.year + 1, month=1)
        return DueMonth(year=self.year, month=self.month + 1)

    def clamp_day(self, day_of_month: int) -> date:
        """Date for ``day_of_month`` in this month, capped at its last day."""
        day = min(day_of_month, last_day_of_month(self.year, self.month))
        return date(self.year, self.month, day)


@dataclass(frozen=True)
class DueMonthRange:
    """Months after ``start``'s month up to and including ``until``'s month.

    Iterating yields :class:`DueMonth` values oldest first; the range can be
    iterated any number of times.
    """

    start: date
    until: date

    def __iter__(self) -> Iterator[DueMonth]:
        last = DueMonth.of(self.until)
        due = DueMonth.of(self.start).next()
        while due <= last:
            yield due
            due = due.next()

    def __len__(self) -> int:
        months = (self.until.year - self.start.year) * 12 + (
            self.until.month - self.start.month
        )
        return max(months, 0)


def resolve_start_date(
    template: RecurringTemplateSnapshot, today: date, store: RecurrenceStore
) -> date:
    """Pick the date due months are counted from.

    A watermark in the future is treated as corrupt: it is cleared in the store
    and the template restarts from ``start_date``. A start in the future is
    clamped to ``today`` so no future month is ever produced.
    """
    start = template.last_processed or template.start_date

    if template.last_processed is not None and template.last_processed > today:
        current_app.logger.warning(
            "recurrence_watermark_reset template_id=%s last_processed=%s",
            template.id,
            template.last_processed,
        )
        with store.atomic():
            store.clear_watermark(template.id)
        start = template.start_date

    if start > today:
        current_app.logger.warning(
            "recurrence_future_start template_id=%s start=%s today=%s",
            template.id,
            start,
            today,
        )
        start = today

    return start


def enumerate_due_months(
    template: RecurringTemplateSnapshot, today: date, store: RecurrenceStore
) -> DueMonthRange:
    return DueMonthRange(start=resolve_start_date(template, today, store), until=today)
