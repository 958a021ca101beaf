"""
pocketledger - persistence core for a personal-finance ledger

Stores accounts, category trees, transactions and their split lines in a
single SQLite file, with exact fixed-point money and named migrations.
"""

from .commands import add_transaction, get_transactions
from .db import (
    Account,
    Category,
    ConstraintViolation,
    LedgerRepository,
    Transaction,
    TransactionDetail,
    open_ledger,
)
from .models import (
    CategoryKind,
    MonetaryValue,
    PaymentMethod,
    TransactionStatus,
    TransactionType,
)

__version__ = "0.1.0"

__all__ = [
    "Account",
    "Category",
    "CategoryKind",
    "ConstraintViolation",
    "LedgerRepository",
    "MonetaryValue",
    "PaymentMethod",
    "Transaction",
    "TransactionDetail",
    "TransactionStatus",
    "TransactionType",
    "add_transaction",
    "get_transactions",
    "open_ledger",
]
