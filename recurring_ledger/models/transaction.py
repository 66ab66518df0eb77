# mypy: disable-error-code=name-defined

from uuid import uuid4

from sqlalchemy.dialects.postgresql import UUID

from recurring_ledger.extensions.database import db
from recurring_ledger.utils.datetime_utils import utc_now_naive


class Transaction(db.Model):
    __tablename__ = "transactions"

    id = db.Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = db.Column(UUID(as_uuid=True), db.ForeignKey("users.id"), nullable=False)
    account_id = db.Column(
        UUID(as_uuid=True), db.ForeignKey("accounts.id"), nullable=False
    )

    date = db.Column(db.Date, nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    merchant = db.Column(db.String(120))
    description = db.Column(db.String(300))
    category = db.Column(db.String(64))
    is_recurring = db.Column(db.Boolean, default=False, nullable=False)

    recurring_transaction_id = db.Column(
        UUID(as_uuid=True),
        db.ForeignKey("recurring_transactions.id"),
        nullable=True,
    )
    # Calendar month a recurring template materialized this row for.
    recurrence_year = db.Column(db.Integer, nullable=True)
    recurrence_month = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime, default=utc_now_naive)
    updated_at = db.Column(db.DateTime, default=utc_now_naive, onupdate=utc_now_naive)

    account = db.relationship("Account", backref="transactions")
    recurring_transaction = db.relationship(
        "RecurringTransaction", backref="transactions"
    )

    __table_args__ = (
        db.UniqueConstraint(
            "recurring_transaction_id",
            "recurrence_year",
            "recurrence_month",
            name="uq_transactions_recurring_period",
        ),
        db.Index("ix_transactions_account_date", "account_id", "date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Transaction(id={self.id}, date={self.date}, amount={self.amount}, "
            f"recurring_transaction_id={self.recurring_transaction_id})>"
        )
