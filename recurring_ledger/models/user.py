# mypy: disable-error-code=name-defined

import uuid

from sqlalchemy.dialects.postgresql import UUID

from recurring_ledger.extensions.database import db
from recurring_ledger.utils.datetime_utils import utc_now_naive


class User(db.Model):
    __tablename__ = "users"
    id = db.Column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False
    )
    name = db.Column(db.String(128), nullable=False)
    email = db.Column(db.String(128), nullable=False, unique=True)
    created_at = db.Column(db.DateTime, default=utc_now_naive)

    accounts = db.relationship("Account", backref="user", lazy=True)

    def __repr__(self) -> str:
        return f"<User {self.name}>"
