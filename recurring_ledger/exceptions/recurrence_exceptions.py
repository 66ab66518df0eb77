from typing import Any, Dict, Optional


class RecurrenceError(Exception):
    def __init__(
        self,
        message: str,
        *,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class DuplicateMaterializationError(RecurrenceError):
    """The store already holds a transaction for this template and month."""

    def __init__(
        self,
        message: str = "Recurring transaction already materialized",
        *,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details)


class AccountBalanceUpdateError(RecurrenceError):
    def __init__(
        self,
        message: str = "Account balance could not be updated",
        *,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details)
