from .recurrence_exceptions import (
    AccountBalanceUpdateError,
    DuplicateMaterializationError,
    RecurrenceError,
)

__all__ = [
    "RecurrenceError",
    "DuplicateMaterializationError",
    "AccountBalanceUpdateError",
]
