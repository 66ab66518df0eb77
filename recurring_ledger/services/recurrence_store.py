from __future__ import annotations

from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterator, Protocol
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from recurring_ledger.exceptions import (
    AccountBalanceUpdateError,
    DuplicateMaterializationError,
)
from recurring_ledger.extensions.database import db
from recurring_ledger.models.account import Account
from recurring_ledger.models.recurring_transaction import RecurringTransaction
from recurring_ledger.models.transaction import Transaction
from recurring_ledger.services.recurrence_eligibility import (
    build_eligibility_criteria,
)
from recurring_ledger.utils.datetime_utils import month_bounds


@dataclass(frozen=True)
class MaterializedTransactionFields:
    user_id: UUID
    account_id: UUID
    date: date
    amount: Decimal
    merchant: str | None
    description: str | None
    category: str | None
    recurring_transaction_id: UUID

    def build(self) -> Transaction:
        return Transaction(
            user_id=self.user_id,
            account_id=self.account_id,
            date=self.date,
            amount=self.amount,
            merchant=self.merchant,
            description=self.description,
            category=self.category,
            is_recurring=False,
            recurring_transaction_id=self.recurring_transaction_id,
            recurrence_year=self.date.year,
            recurrence_month=self.date.month,
        )


@dataclass(frozen=True)
class RecurringTemplateSnapshot:
    """Plain copy of a template row, safe to read after the session commits."""

    id: UUID
    user_id: UUID
    account_id: UUID
    day_of_month: int
    start_date: date
    end_date: date | None
    last_processed: date | None
    signed_amount: Decimal
    merchant: str | None
    description: str | None
    category: str | None

    @classmethod
    def from_model(
        cls, template: RecurringTransaction
    ) -> "RecurringTemplateSnapshot":
        return cls(
            id=template.id,
            user_id=template.user_id,
            account_id=template.account_id,
            day_of_month=template.day_of_month,
            start_date=template.start_date,
            end_date=template.end_date,
            last_processed=template.last_processed,
            signed_amount=template.signed_amount,
            merchant=template.merchant,
            description=template.description,
            category=template.category,
        )


class RecurrenceStore(Protocol):
    def select_eligible_templates(self, today: date) -> list[RecurringTransaction]:
        # Protocol contract only; backends translate the eligibility predicates.
        ...

    def clear_watermark(self, template_id: UUID) -> None:
        # Protocol contract only; persists a null watermark.
        ...

    def find_materialized_transaction(
        self,
        template_id: UUID,
        account_id: UUID,
        user_id: UUID,
        month: int,
        year: int,
    ) -> Transaction | None:
        # Protocol contract only; looks up the row for one calendar month.
        ...

    def insert_transaction(self, fields: MaterializedTransactionFields) -> Transaction:
        # Protocol contract only; raises DuplicateMaterializationError on conflict.
        ...

    def increment_account_balance(
        self, account_id: UUID, user_id: UUID, delta: Decimal
    ) -> None:
        # Protocol contract only; must be an atomic delta at the store layer.
        ...

    def set_watermark(self, template_id: UUID, value: date) -> None:
        # Protocol contract only; persists the new watermark.
        ...

    def atomic(self) -> AbstractContextManager[None]:
        # Protocol contract only; commits on success, rolls back on error.
        ...

    def rollback(self) -> None:
        # Protocol contract only; discards pending work after a failure.
        ...


class SQLAlchemyRecurrenceStore:
    """Recurrence store backed by the Flask-SQLAlchemy session.

    Write methods only flush; callers group them with :meth:`atomic` so the
    transaction insert and its balance delta commit together.
    """

    def select_eligible_templates(self, today: date) -> list[RecurringTransaction]:
        return list(
            RecurringTransaction.query.filter(*build_eligibility_criteria(today))
            .order_by(RecurringTransaction.created_at.asc())
            .all()
        )

    def clear_watermark(self, template_id: UUID) -> None:
        RecurringTransaction.query.filter_by(id=template_id).update(
            {RecurringTransaction.last_processed: None},
            synchronize_session=False,
        )

    def find_materialized_transaction(
        self,
        template_id: UUID,
        account_id: UUID,
        user_id: UUID,
        month: int,
        year: int,
    ) -> Transaction | None:
        month_start, next_month_start = month_bounds(date(year, month, 1))
        return (
            Transaction.query.filter(
                Transaction.user_id == user_id,
                Transaction.account_id == account_id,
                Transaction.recurring_transaction_id == template_id,
                Transaction.date >= month_start,
                Transaction.date < next_month_start,
            )
            .order_by(Transaction.date.asc())
            .first()
        )

    def insert_transaction(self, fields: MaterializedTransactionFields) -> Transaction:
        transaction = fields.build()
        db.session.add(transaction)
        try:
            db.session.flush()
        except IntegrityError as exc:
            db.session.rollback()
            if not self._period_materialized(fields):
                raise
            raise DuplicateMaterializationError(
                details={
                    "recurring_transaction_id": str(fields.recurring_transaction_id),
                    "year": fields.date.year,
                    "month": fields.date.month,
                }
            ) from exc
        return transaction

    @staticmethod
    def _period_materialized(fields: MaterializedTransactionFields) -> bool:
        # Only a clash on uq_transactions_recurring_period leaves such a row.
        existing = Transaction.query.filter_by(
            recurring_transaction_id=fields.recurring_transaction_id,
            recurrence_year=fields.date.year,
            recurrence_month=fields.date.month,
        ).first()
        return existing is not None

    def increment_account_balance(
        self, account_id: UUID, user_id: UUID, delta: Decimal
    ) -> None:
        updated = Account.query.filter_by(id=account_id, user_id=user_id).update(
            {Account.balance: Account.balance + delta},
            synchronize_session=False,
        )
        if updated != 1:
            raise AccountBalanceUpdateError(
                details={"account_id": str(account_id), "user_id": str(user_id)}
            )

    def set_watermark(self, template_id: UUID, value: date) -> None:
        RecurringTransaction.query.filter_by(id=template_id).update(
            {RecurringTransaction.last_processed: value},
            synchronize_session=False,
        )

    @contextmanager
    def atomic(self) -> Iterator[None]:
        try:
            yield
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

    def rollback(self) -> None:
        db.session.rollback()
