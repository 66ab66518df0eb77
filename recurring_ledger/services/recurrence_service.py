from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from flask import current_app

from recurring_ledger.exceptions import DuplicateMaterializationError
from recurring_ledger.models.transaction import Transaction
from recurring_ledger.services.recurrence_schedule import (
    DueMonth,
    enumerate_due_months,
)
from recurring_ledger.services.recurrence_store import (
    MaterializedTransactionFields,
    RecurrenceStore,
    RecurringTemplateSnapshot,
    SQLAlchemyRecurrenceStore,
)


@dataclass(frozen=True)
class RecurrenceRunResult:
    processed: int


class TemplateMaterializer:
    """Materializes the due months of a single recurring template.

    ``created`` counts committed transactions, so it stays accurate when a
    later month fails and the error escapes :meth:`run`.
    """

    def __init__(
        self,
        template: RecurringTemplateSnapshot,
        *,
        today: date,
        store: RecurrenceStore,
    ) -> None:
        self.template = template
        self._today = today
        self._store = store
        self.created = 0
        self.watermark: date | None = None

    def _find_existing(self, due: DueMonth) -> Transaction | None:
        return self._store.find_materialized_transaction(
            self.template.id,
            self.template.account_id,
            self.template.user_id,
            due.month,
            due.year,
        )

    def _adopt_existing(self, existing: Transaction, due: DueMonth) -> None:
        if existing.date <= self._today:
            self.watermark = existing.date
            return
        current_app.logger.warning(
            "recurrence_existing_in_future template_id=%s transaction_id=%s "
            "month=%s/%s date=%s",
            self.template.id,
            existing.id,
            due.month,
            due.year,
            existing.date,
        )

    def _fields_for(self, target_date: date) -> MaterializedTransactionFields:
        return MaterializedTransactionFields(
            user_id=self.template.user_id,
            account_id=self.template.account_id,
            date=target_date,
            amount=self.template.signed_amount,
            merchant=self.template.merchant,
            description=self.template.description,
            category=self.template.category,
            recurring_transaction_id=self.template.id,
        )

    def _materialize(self, due: DueMonth, target_date: date) -> bool:
        try:
            with self._store.atomic():
                transaction = self._store.insert_transaction(
                    self._fields_for(target_date)
                )
                transaction_id = transaction.id
                self._store.increment_account_balance(
                    self.template.account_id,
                    self.template.user_id,
                    self.template.signed_amount,
                )
        except DuplicateMaterializationError:
            # Another run committed this month first.
            current_app.logger.info(
                "recurrence_insert_conflict template_id=%s month=%s/%s",
                self.template.id,
                due.month,
                due.year,
            )
            existing = self._find_existing(due)
            if existing is not None:
                self._adopt_existing(existing, due)
            return False

        current_app.logger.info(
            "recurrence_transaction_created transaction_id=%s template_id=%s "
            "user_id=%s date=%s",
            transaction_id,
            self.template.id,
            self.template.user_id,
            target_date,
        )
        return True

    def run(self, due_months: Iterable[DueMonth]) -> int:
        for due in due_months:
            existing = self._find_existing(due)
            if existing is not None:
                current_app.logger.info(
                    "recurrence_already_materialized template_id=%s month=%s/%s",
                    self.template.id,
                    due.month,
                    due.year,
                )
                self._adopt_existing(existing, due)
                continue

            target_date = due.clamp_day(self.template.day_of_month)
            if target_date > self._today:
                current_app.logger.info(
                    "recurrence_stop_future template_id=%s date=%s",
                    self.template.id,
                    target_date,
                )
                break
            end_date = self.template.end_date
            if end_date is not None and target_date > end_date:
                current_app.logger.info(
                    "recurrence_stop_end_date template_id=%s date=%s end_date=%s",
                    self.template.id,
                    target_date,
                    end_date,
                )
                break

            if self._materialize(due, target_date):
                self.watermark = target_date
                self.created += 1

        self._commit_watermark()
        return self.created

    def _commit_watermark(self) -> None:
        if self.watermark is None:
            return
        # Candidates are past dates when set by run(); never persist a future one.
        if self.watermark > self._today:
            current_app.logger.warning(
                "recurrence_watermark_skipped template_id=%s watermark=%s",
                self.template.id,
                self.watermark,
            )
            return
        with self._store.atomic():
            self._store.set_watermark(self.template.id, self.watermark)


class RecurrenceService:
    @staticmethod
    def _process_template(
        template: RecurringTemplateSnapshot,
        *,
        today: date,
        store: RecurrenceStore,
    ) -> int:
        materializer = TemplateMaterializer(template, today=today, store=store)
        try:
            due_months = enumerate_due_months(template, today, store)
            current_app.logger.info(
                "recurrence_template_started template_id=%s due_months=%s",
                template.id,
                len(due_months),
            )
            materializer.run(due_months)
        except Exception:
            store.rollback()
            current_app.logger.exception(
                "recurrence_template_failed template_id=%s user_id=%s "
                "account_id=%s created=%s",
                template.id,
                template.user_id,
                template.account_id,
                materializer.created,
            )
            return materializer.created

        current_app.logger.info(
            "recurrence_template_processed template_id=%s created=%s watermark=%s",
            template.id,
            materializer.created,
            materializer.watermark,
        )
        return materializer.created

    @staticmethod
    def process_recurring_transactions(
        reference_date: date | None = None,
        store: RecurrenceStore | None = None,
    ) -> RecurrenceRunResult:
        today = reference_date or date.today()
        store = store or SQLAlchemyRecurrenceStore()

        try:
            templates = [
                RecurringTemplateSnapshot.from_model(template)
                for template in store.select_eligible_templates(today)
            ]
        except Exception:
            current_app.logger.exception(
                "recurrence_selection_failed reference_date=%s", today
            )
            raise

        current_app.logger.info(
            "recurrence_run_started reference_date=%s templates=%s",
            today,
            len(templates),
        )

        processed = sum(
            RecurrenceService._process_template(template, today=today, store=store)
            for template in templates
        )

        current_app.logger.info(
            "recurrence_run_finished reference_date=%s processed=%s",
            today,
            processed,
        )
        return RecurrenceRunResult(processed=processed)
