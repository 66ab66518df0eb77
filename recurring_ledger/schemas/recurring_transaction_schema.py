from marshmallow import Schema, fields


class RecurringTransactionSchema(Schema):
    """Serialized view of a recurring transaction template."""

    id = fields.UUID(metadata={"description": "Template identifier"})
    user_id = fields.UUID(metadata={"description": "Owning user"})
    account_id = fields.UUID(metadata={"description": "Account receiving entries"})
    amount = fields.Decimal(
        as_string=True,
        metadata={"description": "Unsigned amount", "example": "150.50"},
    )
    is_expense = fields.Bool(metadata={"description": "Debits the account"})
    merchant = fields.Str(allow_none=True)
    description = fields.Str(allow_none=True)
    category = fields.Str(allow_none=True)
    day_of_month = fields.Int(
        metadata={"description": "Target day, capped at the month length"}
    )
    start_date = fields.Date()
    end_date = fields.Date(allow_none=True)
    is_active = fields.Bool()
    last_processed = fields.Date(
        allow_none=True,
        metadata={"description": "Date of the most recent materialized month"},
    )


class RecurrenceRunResultSchema(Schema):
    processed = fields.Int(
        required=True,
        metadata={"description": "Transactions created by the run"},
    )
