"""
Closed value sets stored as text in the ledger.

The database enforces the same sets with CHECK constraints; parsing through
these enums rejects bad values before they reach the store.
"""

from enum import Enum


class TransactionType(str, Enum):
    """
    What a transaction represents.

    - TRANSFER: Money moving between two of the user's own accounts; needs
      both a source and a destination account
    - Every other type needs at least one account reference
    """

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"
    REIMBURSEMENT = "reimbursement"
    REFUND = "refund"
    OTHER = "other"


class TransactionStatus(str, Enum):
    """Lifecycle status of a transaction."""

    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class PaymentMethod(str, Enum):
    """How the money moved."""

    CASH = "cash"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    PAYPAL = "paypal"
    APPLE = "apple"
    OTHER = "other"


class CategoryKind(str, Enum):
    """Which category tree a category belongs to."""

    ACCOUNT = "account"
    TRANSACTION = "transaction"

    @property
    def table(self) -> str:
        """Name of the table holding categories of this kind."""
        if self is CategoryKind.ACCOUNT:
            return "accounts_categories"
        return "transactions_categories"


def sql_values(enum_cls) -> str:
    """Render an enum's values as a SQL ``IN`` list, e.g. ``'a', 'b'``."""
    return ", ".join(f"'{member.value}'" for member in enum_cls)
