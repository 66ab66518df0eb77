from .recurring_transaction_schema import (
    RecurrenceRunResultSchema,
    RecurringTransactionSchema,
)

__all__ = ["RecurringTransactionSchema", "RecurrenceRunResultSchema"]
