"""
Transactions repository module for transaction and detail operations.

Handles all transaction-related database operations including:
- Listing transactions (skipping rows that cannot be decoded)
- Inserting transactions after checking the ledger rules
- Reading and inserting transaction details (split lines)
"""

import logging
import sqlite3
from dataclasses import replace
from typing import Iterable, Optional

from .base import BaseRepository
from .exceptions import ConstraintViolation
from .models import Transaction, TransactionDetail
from .schema import (
    DETAIL_COLUMNS,
    TRANSACTION_COLUMNS,
    column_list,
    placeholders,
)

logger = logging.getLogger(__name__)

_SELECT_TRANSACTIONS = f"SELECT {column_list(TRANSACTION_COLUMNS)} FROM transactions"

_INSERT_TRANSACTION = f"""
    INSERT INTO transactions ({column_list(TRANSACTION_COLUMNS)})
    VALUES ({placeholders(TRANSACTION_COLUMNS)})
"""

_SELECT_DETAILS = f"""
    SELECT {column_list(DETAIL_COLUMNS, prefix="d.")}, t.currency, t.exchange_rate
    FROM transaction_details d
    JOIN transactions t ON t.id = d.transaction_id
"""

_INSERT_DETAIL = f"""
    INSERT INTO transaction_details ({column_list(DETAIL_COLUMNS)})
    VALUES ({placeholders(DETAIL_COLUMNS)})
"""


class TransactionRepository(BaseRepository):
    """
    Repository for managing transactions and their details.

    Transactions are insert-only here; there is no update or delete.
    """

    entity_name = "transaction"

    # =========================================================================
    # Read Operations
    # =========================================================================

    def list_transactions(self) -> list[Transaction]:
        """
        Get every transaction, newest ``transaction_date`` first.

        A row that cannot be decoded (for example an unknown status) is
        logged and left out; the rest of the list is still returned.
        """
        return self._fetch_all(
            f"{_SELECT_TRANSACTIONS} ORDER BY transaction_date DESC, id DESC",
            (),
            Transaction.from_row,
        )

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get a transaction by ID."""
        return self._fetch_one(
            f"{_SELECT_TRANSACTIONS} WHERE id = ?",
            (transaction_id,),
            Transaction.from_row,
        )

    def count_transactions(self) -> int:
        """Count stored transactions, decodable or not."""
        with self.guard.connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM transactions").fetchone()[0]

    def list_details(self, transaction_id: int) -> list[TransactionDetail]:
        """Get the detail lines of a transaction, ordered by id."""
        return self._fetch_all(
            f"{_SELECT_DETAILS} WHERE d.transaction_id = ? ORDER BY d.id",
            (transaction_id,),
            TransactionDetail.from_row,
        )

    # =========================================================================
    # Create Operations
    # =========================================================================

    def insert_transaction(self, transaction: Transaction) -> Transaction:
        """
        Insert a transaction.

        Every column is bound positionally in TRANSACTION_COLUMNS order.

        Args:
            transaction: The transaction to store; ``id`` None lets the
                store assign one

        Returns:
            The stored transaction with its ID

        Raises:
            ConstraintViolation: If a ledger rule, foreign key or CHECK
                constraint is broken; nothing is stored
        """
        transaction.validate()
        transaction_id = self._insert(_INSERT_TRANSACTION, transaction.to_params())
        logger.info(
            f"Recorded {transaction.type.value} transaction {transaction_id} "
            f"of {transaction.amount} {transaction.amount.currency}"
        )
        return replace(transaction, id=transaction_id)

    @staticmethod
    def _check_detail_currency(detail: TransactionDetail, currency: str):
        if detail.amount.currency != currency:
            raise ConstraintViolation(
                f"Detail currency {detail.amount.currency} does not match "
                f"transaction currency {currency}"
            )

    def insert_detail(self, detail: TransactionDetail) -> TransactionDetail:
        """
        Insert a detail line for an existing transaction.

        Raises:
            ConstraintViolation: If the parent transaction does not exist or
                uses another currency
            ValueError: If transaction_id is missing
        """
        if detail.transaction_id is None:
            raise ValueError("Detail transaction_id is required")

        try:
            with self.guard.transaction() as conn:
                row = conn.execute(
                    "SELECT currency FROM transactions WHERE id = ?",
                    (detail.transaction_id,),
                ).fetchone()
                if row is None:
                    raise ConstraintViolation(
                        f"Transaction {detail.transaction_id} does not exist"
                    )
                self._check_detail_currency(detail, row["currency"])
                detail_id = conn.execute(_INSERT_DETAIL, detail.to_params()).lastrowid
        except ConstraintViolation as e:
            logger.warning(f"Rejected transaction detail insert: {e}")
            raise
        except sqlite3.Error as e:
            logger.error(f"Error inserting transaction detail: {e}", exc_info=True)
            raise

        return replace(detail, id=detail_id)

    def insert_transaction_with_details(
        self, transaction: Transaction, details: Iterable[TransactionDetail]
    ) -> tuple[Transaction, list[TransactionDetail]]:
        """
        Insert a transaction and its detail lines as one unit.

        Either the transaction and every detail are stored, or none of them.
        Each detail is linked to the new transaction regardless of its own
        ``transaction_id``.

        Returns:
            The stored transaction and details, with their IDs
        """
        transaction.validate()
        details = list(details)
        for detail in details:
            self._check_detail_currency(detail, transaction.amount.currency)

        try:
            with self.guard.transaction() as conn:
                transaction_id = conn.execute(
                    _INSERT_TRANSACTION, transaction.to_params()
                ).lastrowid
                stored_details = []
                for detail in details:
                    linked = replace(detail, transaction_id=transaction_id)
                    detail_id = conn.execute(_INSERT_DETAIL, linked.to_params()).lastrowid
                    stored_details.append(replace(linked, id=detail_id))
        except ConstraintViolation as e:
            logger.warning(f"Rejected transaction with details: {e}")
            raise
        except sqlite3.Error as e:
            logger.error(f"Error inserting transaction with details: {e}", exc_info=True)
            raise

        logger.info(
            f"Recorded transaction {transaction_id} with {len(stored_details)} details"
        )
        return replace(transaction, id=transaction_id), stored_details
