from decimal import Decimal
from uuid import uuid4

from sqlalchemy.dialects.postgresql import UUID

from recurring_ledger.extensions.database import db


class Account(db.Model):
    __tablename__ = "accounts"

    id = db.Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = db.Column(UUID(as_uuid=True), db.ForeignKey("users.id"), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    balance = db.Column(
        db.Numeric(14, 2),
        nullable=False,
        default=Decimal("0"),
        server_default="0",
    )

    def __repr__(self) -> str:
        return f"<Account id={self.id} name={self.name!r} balance={self.balance}>"
