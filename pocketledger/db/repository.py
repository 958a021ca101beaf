"""
Ledger repository facade.

Composes the entity repositories over one ConnectionGuard and owns the
process-wide ledger instance.
"""

import logging
import threading
from pathlib import Path
from typing import Optional, Union

from pocketledger.models.enums import CategoryKind

from .accounts import AccountRepository
from .base import ConnectionGuard
from .categories import CategoryRepository
from .migrations import MigrationEngine
from .models import Transaction
from .transactions import TransactionRepository

logger = logging.getLogger(__name__)


class LedgerRepository:
    """
    Main repository giving access to every ledger entity.

    The guard is passed in rather than opened here, so tests can hand over an
    in-memory database.
    """

    def __init__(self, guard: ConnectionGuard):
        self.guard = guard
        self.account_categories = CategoryRepository(guard, CategoryKind.ACCOUNT)
        self.transaction_categories = CategoryRepository(
            guard, CategoryKind.TRANSACTION
        )
        self.accounts = AccountRepository(guard)
        self.transactions = TransactionRepository(guard)

    def list_transactions(self) -> list[Transaction]:
        return self.transactions.list_transactions()

    def insert_transaction(self, transaction: Transaction) -> Transaction:
        return self.transactions.insert_transaction(transaction)

    def close(self):
        self.guard.close()


def open_ledger(db_path: Optional[Union[Path, str]] = None) -> LedgerRepository:
    """
    Open the ledger database and bring its schema up to date.

    Args:
        db_path: Database file, or ":memory:". Defaults to the configured path.

    Raises:
        StoreOpenFailure: If the database cannot be opened
        MigrationFailure: If a migration cannot be applied
    """
    guard = ConnectionGuard(db_path)
    try:
        MigrationEngine(guard).run()
    except Exception:
        guard.close()
        raise
    logger.info(f"Ledger ready at {guard.db_path}")
    return LedgerRepository(guard)


# Process-wide ledger, opened once
_default_repository: Optional[LedgerRepository] = None
_default_lock = threading.Lock()


def get_repository() -> LedgerRepository:
    """Get the process-wide ledger, opening it on first use."""
    global _default_repository
    with _default_lock:
        if _default_repository is None:
            _default_repository = open_ledger()
        return _default_repository


def set_repository(repository: LedgerRepository):
    """Install an already opened ledger as the process-wide one."""
    global _default_repository
    with _default_lock:
        _default_repository = repository


def reset_repository():
    """Close and forget the process-wide ledger."""
    global _default_repository
    with _default_lock:
        if _default_repository is not None:
            _default_repository.close()
        _default_repository = None
