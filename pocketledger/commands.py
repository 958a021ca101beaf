"""
Operations exposed to the GUI command layer.

The front-end calls exactly these two; both go through the process-wide
ledger unless a repository is handed in.
"""

import logging
from typing import Optional, Union

from pocketledger.db import LedgerRepository, Transaction, get_repository

logger = logging.getLogger(__name__)


def get_transactions(repository: Optional[LedgerRepository] = None) -> list[Transaction]:
    """Return every transaction in the ledger, newest first."""
    repository = repository or get_repository()
    return repository.list_transactions()


def add_transaction(
    new_transaction: Union[Transaction, dict],
    repository: Optional[LedgerRepository] = None,
) -> Transaction:
    """
    Store a new transaction.

    Args:
        new_transaction: A Transaction, or the GUI's field mapping
        repository: Ledger to write to; defaults to the process-wide one

    Returns:
        The stored transaction, carrying its assigned ID

    Raises:
        ConstraintViolation: If the transaction breaks a ledger rule
        ValueError: If the mapping cannot be turned into a Transaction
    """
    if isinstance(new_transaction, dict):
        new_transaction = Transaction.from_dict(new_transaction)

    repository = repository or get_repository()
    return repository.insert_transaction(new_transaction)
