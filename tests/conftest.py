"""
Pytest configuration and fixtures for pocketledger tests.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Generator

import pytest

from pocketledger.db import (
    Account,
    Category,
    ConnectionGuard,
    LedgerRepository,
    Transaction,
    open_ledger,
    reset_repository,
)
from pocketledger.models import CategoryKind, MonetaryValue, TransactionType


@pytest.fixture
def guard() -> Generator[ConnectionGuard, None, None]:
    """Unmigrated in-memory connection guard."""
    guard = ConnectionGuard(":memory:")
    yield guard
    guard.close()


@pytest.fixture
def ledger() -> Generator[LedgerRepository, None, None]:
    """Migrated in-memory ledger."""
    repository = open_ledger(":memory:")
    yield repository
    repository.close()


@pytest.fixture
def db_file(tmp_path: Path) -> Path:
    """Path for a file-backed ledger inside the test's temp directory."""
    return tmp_path / "data" / "ledger.db"


@pytest.fixture
def file_ledger(db_file: Path) -> Generator[LedgerRepository, None, None]:
    """Migrated file-backed ledger."""
    repository = open_ledger(db_file)
    yield repository
    repository.close()


@pytest.fixture(autouse=True)
def _reset_default_repository() -> Generator[None, None, None]:
    """Never leak the process-wide ledger between tests."""
    yield
    reset_repository()


@pytest.fixture
def seeded(ledger: LedgerRepository) -> dict:
    """
    A ledger with one category of each kind and two accounts.

    Returns a dict of the stored ids.
    """
    bank = ledger.account_categories.insert_category(
        Category(id=None, name="Bank", kind=CategoryKind.ACCOUNT)
    )
    groceries = ledger.transaction_categories.insert_category(
        Category(id=None, name="Groceries", type="expense")
    )
    checking = ledger.accounts.insert_account(
        Account(id=None, category_id=bank.id, name="Checking")
    )
    savings = ledger.accounts.insert_account(
        Account(id=None, category_id=bank.id, name="Savings")
    )
    return {
        "account_category": bank.id,
        "category": groceries.id,
        "checking": checking.id,
        "savings": savings.id,
    }


@pytest.fixture
def make_transaction(seeded: dict) -> Callable[..., Transaction]:
    """Factory for valid expense transactions against the seeded ledger."""

    def _make(**overrides) -> Transaction:
        when = datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)
        values = {
            "id": None,
            "category_id": seeded["category"],
            "type": TransactionType.EXPENSE,
            "amount": MonetaryValue(1550, 2),
            "date": when,
            "transaction_date": when,
            "from_account_id": seeded["checking"],
            "description": "Weekly shop",
        }
        values.update(overrides)
        return Transaction(**values)

    return _make
