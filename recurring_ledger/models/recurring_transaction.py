# mypy: disable-error-code=name-defined

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

from sqlalchemy.dialects.postgresql import UUID

from recurring_ledger.extensions.database import db
from recurring_ledger.utils.datetime_utils import utc_now_naive


class RecurringTransaction(db.Model):
    """Template that materializes one transaction per calendar month."""

    __tablename__ = "recurring_transactions"

    id = db.Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = db.Column(UUID(as_uuid=True), db.ForeignKey("users.id"), nullable=False)
    account_id = db.Column(
        UUID(as_uuid=True), db.ForeignKey("accounts.id"), nullable=False
    )

    amount = db.Column(db.Numeric(12, 2), nullable=False)
    is_expense = db.Column(
        db.Boolean, nullable=False, default=True, server_default=db.true()
    )
    merchant = db.Column(db.String(120), nullable=True)
    description = db.Column(db.String(300), nullable=True)
    category = db.Column(db.String(64), nullable=True)

    day_of_month = db.Column(db.Integer, nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=True)
    is_active = db.Column(
        db.Boolean, nullable=False, default=True, server_default=db.true()
    )
    # Date of the most recent materialized month.
    last_processed = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime, default=utc_now_naive, nullable=False)
    updated_at = db.Column(
        db.DateTime,
        default=utc_now_naive,
        onupdate=utc_now_naive,
        nullable=False,
    )

    account = db.relationship("Account", backref="recurring_transactions")

    __table_args__ = (
        db.CheckConstraint(
            "day_of_month >= 1 AND day_of_month <= 31",
            name="ck_recurring_transactions_day_of_month",
        ),
        db.CheckConstraint(
            "amount >= 0", name="ck_recurring_transactions_amount_nonneg"
        ),
        db.Index("ix_recurring_transactions_is_active", "is_active"),
    )

    @property
    def signed_amount(self) -> Decimal:
        return -self.amount if self.is_expense else self.amount

    def __repr__(self) -> str:
        return (
            f"<RecurringTransaction id={self.id} day_of_month={self.day_of_month} "
            f"amount={self.amount} last_processed={self.last_processed}>"
        )
