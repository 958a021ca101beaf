"""
Forward-only schema migrations.

Each migration is a named, ordered group of statements. The ``migrations``
table records the names that have been applied, and that record is the only
thing consulted to decide whether a migration still has to run. A migration's
statements and its record are written in one SQLite transaction.

Statements of a released migration are never edited; schema changes go into a
new migration with a new name.
"""

import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from .base import ConnectionGuard
from .exceptions import ConstraintViolation, MigrationFailure
from .models import MigrationRecord
from .schema import (
    ACCOUNTS_CATEGORIES_TABLE,
    ACCOUNTS_TABLE,
    INDEX_STATEMENTS,
    MIGRATION_COLUMNS,
    MIGRATIONS_TABLE,
    TRANSACTION_DETAILS_TABLE,
    TRANSACTIONS_CATEGORIES_TABLE,
    TRANSACTIONS_TABLE,
    column_list,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Migration:
    """A named schema change."""

    name: str
    statements: tuple[str, ...]

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Migration name cannot be empty")
        if not self.statements:
            raise ValueError(f"Migration '{self.name}' has no statements")
        object.__setattr__(self, "statements", tuple(self.statements))


# Applied in this order on every startup
MIGRATIONS = (
    Migration("create_accounts_categories", (ACCOUNTS_CATEGORIES_TABLE,)),
    Migration("create_accounts", (ACCOUNTS_TABLE,)),
    Migration("create_transactions_categories", (TRANSACTIONS_CATEGORIES_TABLE,)),
    Migration("create_transactions", (TRANSACTIONS_TABLE,)),
    Migration("create_transaction_details", (TRANSACTION_DETAILS_TABLE,)),
    Migration("create_indexes", tuple(INDEX_STATEMENTS)),
)


class MigrationEngine:
    """Brings a ledger database up to date with a list of migrations."""

    def __init__(
        self, guard: ConnectionGuard, migrations: Iterable[Migration] = MIGRATIONS
    ):
        """
        Initialize the engine.

        Args:
            guard: The shared connection guard
            migrations: Migrations in the order they must be applied

        Raises:
            ValueError: If two migrations share a name
        """
        self.guard = guard
        self.migrations = tuple(migrations)

        names = [migration.name for migration in self.migrations]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate migration names: {', '.join(duplicates)}")

    def ensure_ledger_table(self):
        """Create the migrations table; it has no dependencies."""
        try:
            with self.guard.connection() as conn:
                conn.execute(MIGRATIONS_TABLE)
        except sqlite3.Error as e:
            logger.error(f"Failed to create migrations table: {e}", exc_info=True)
            raise MigrationFailure("migrations", str(e)) from e

    @staticmethod
    def _is_applied(conn: sqlite3.Connection, name: str) -> bool:
        cursor = conn.execute("SELECT 1 FROM migrations WHERE name = ?", (name,))
        return cursor.fetchone() is not None

    def is_applied(self, name: str) -> bool:
        """Check whether a migration has been recorded as applied."""
        self.ensure_ledger_table()
        with self.guard.connection() as conn:
            return self._is_applied(conn, name)

    def applied(self) -> list[MigrationRecord]:
        """Get every applied migration in application order."""
        self.ensure_ledger_table()
        with self.guard.connection() as conn:
            cursor = conn.execute(
                f"SELECT {column_list(MIGRATION_COLUMNS)} FROM migrations ORDER BY id"
            )
            return [MigrationRecord.from_row(row) for row in cursor.fetchall()]

    def pending(self) -> list[str]:
        """Names of the configured migrations not yet applied."""
        done = {record.name for record in self.applied()}
        return [m.name for m in self.migrations if m.name not in done]

    def apply(self, migration: Migration) -> bool:
        """
        Apply one migration if it has not been applied yet.

        The statements and the migration record are committed together, so a
        failure leaves neither behind.

        Returns:
            True if the migration ran now, False if it was already applied

        Raises:
            MigrationFailure: If any statement fails
        """
        self.ensure_ledger_table()
        try:
            with self.guard.transaction() as conn:
                if self._is_applied(conn, migration.name):
                    logger.debug(f"Migration '{migration.name}' already applied")
                    return False

                for statement in migration.statements:
                    conn.execute(statement)

                conn.execute(
                    "INSERT INTO migrations (name, date) VALUES (?, ?)",
                    (migration.name, datetime.now(timezone.utc).isoformat()),
                )
        except (sqlite3.Error, ConstraintViolation) as e:
            logger.error(f"Migration '{migration.name}' failed: {e}", exc_info=True)
            raise MigrationFailure(migration.name, str(e)) from e

        logger.info(f"Applied migration '{migration.name}'")
        return True

    def run(self) -> list[str]:
        """
        Apply every pending migration in order.

        Returns:
            Names of the migrations applied by this call
        """
        self.ensure_ledger_table()
        applied_now = [m.name for m in self.migrations if self.apply(m)]

        if applied_now:
            logger.info(f"Ledger schema updated: {', '.join(applied_now)}")
        else:
            logger.debug("Ledger schema is up to date")
        return applied_now
