"""
Database module for the pocketledger ledger.

This module provides the persistence layer: a guarded SQLite connection,
named migrations, and repositories for categories, accounts and transactions.

Structure:
- base.py: ConnectionGuard and the base repository helpers
- schema.py: Table definitions, column order and indexes
- migrations.py: Named, forward-only migrations and their engine
- models.py: Data models (Category, Account, Transaction, TransactionDetail)
- categories.py: Account and transaction category trees
- accounts.py: Accounts
- transactions.py: Transactions and transaction details
- repository.py: Facade and the process-wide ledger
"""

from .accounts import AccountRepository
from .base import BaseRepository, ConnectionGuard
from .categories import CategoryRepository
from .exceptions import (
    ConstraintViolation,
    LedgerError,
    MigrationFailure,
    RowDecodeFailure,
    StoreClosedError,
    StoreOpenFailure,
)
from .migrations import MIGRATIONS, Migration, MigrationEngine
from .models import (
    Account,
    Category,
    MigrationRecord,
    Transaction,
    TransactionDetail,
)
from .repository import (
    LedgerRepository,
    get_repository,
    open_ledger,
    reset_repository,
    set_repository,
)
from .transactions import TransactionRepository

__all__ = [
    # Base
    "BaseRepository",
    "ConnectionGuard",
    # Errors
    "ConstraintViolation",
    "LedgerError",
    "MigrationFailure",
    "RowDecodeFailure",
    "StoreClosedError",
    "StoreOpenFailure",
    # Migrations
    "MIGRATIONS",
    "Migration",
    "MigrationEngine",
    # Models
    "Account",
    "Category",
    "MigrationRecord",
    "Transaction",
    "TransactionDetail",
    # Repositories
    "AccountRepository",
    "CategoryRepository",
    "LedgerRepository",
    "TransactionRepository",
    # Utilities
    "get_repository",
    "open_ledger",
    "reset_repository",
    "set_repository",
]
