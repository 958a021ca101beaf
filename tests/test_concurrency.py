"""
Tests for serialized access through the connection guard.
"""

import sqlite3
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from pocketledger.db import ConnectionGuard, StoreClosedError


class TestConcurrentWrites:
    """Tests for many threads sharing the single connection."""

    @pytest.mark.parametrize("workers", [4, 16])
    def test_concurrent_inserts_all_land(self, ledger, make_transaction, workers) -> None:
        """Test that N concurrent inserts give exactly N intact rows."""
        count = 60
        transactions = [
            make_transaction(id=1000 + i, description=f"txn {i}") for i in range(count)
        ]

        with ThreadPoolExecutor(max_workers=workers) as pool:
            stored = list(pool.map(ledger.insert_transaction, transactions))

        listed = ledger.list_transactions()
        assert ledger.transactions.count_transactions() == count
        assert {t.id for t in listed} == {1000 + i for i in range(count)}
        assert {t.id: t.description for t in listed} == {
            t.id: t.description for t in stored
        }

    def test_reads_during_writes(self, ledger, make_transaction) -> None:
        """Test that readers running beside writers only see whole rows."""
        errors = []
        done = threading.Event()

        def read():
            try:
                while not done.is_set():
                    for transaction in ledger.list_transactions():
                        assert transaction.amount.format() == "15.50"
            except Exception as e:  # surfaced below
                errors.append(e)

        readers = [threading.Thread(target=read) for _ in range(4)]
        for thread in readers:
            thread.start()
        try:
            with ThreadPoolExecutor(max_workers=4) as pool:
                batch = [make_transaction() for _ in range(40)]
                list(pool.map(ledger.insert_transaction, batch))
        finally:
            done.set()
            for thread in readers:
                thread.join()

        assert errors == []
        assert ledger.transactions.count_transactions() == 40


class TestGuard:
    """Tests for the guard's lifecycle."""

    def test_lock_released_after_failure(self, guard) -> None:
        """Test that a failing statement does not keep the guard held."""
        with pytest.raises(sqlite3.OperationalError):
            with guard.connection() as conn:
                conn.execute("SELECT * FROM missing_table")

        with guard.connection() as conn:
            assert conn.execute("SELECT 1").fetchone()[0] == 1

    def test_transaction_rolls_back(self, guard) -> None:
        """Test that a failed group of statements leaves nothing behind."""
        with guard.connection() as conn:
            conn.execute("CREATE TABLE items (id INTEGER PRIMARY KEY)")

        with pytest.raises(RuntimeError):
            with guard.transaction() as conn:
                conn.execute("INSERT INTO items (id) VALUES (1)")
                raise RuntimeError("boom")

        with guard.connection() as conn:
            assert conn.execute("SELECT COUNT(*) FROM items").fetchone()[0] == 0

    def test_closed_guard_refuses_use(self) -> None:
        """Test that the connection cannot be used after close."""
        guard = ConnectionGuard(":memory:")
        guard.close()
        assert guard.closed
        with pytest.raises(StoreClosedError):
            with guard.connection():
                pass
