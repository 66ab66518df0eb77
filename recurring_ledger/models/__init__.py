from .account import Account
from .recurring_transaction import RecurringTransaction
from .transaction import Transaction
from .user import User

__all__ = ["Account", "RecurringTransaction", "Transaction", "User"]
