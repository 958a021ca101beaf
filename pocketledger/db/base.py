"""
Base repository module with connection management.

Provides the single guarded SQLite connection shared by every repository and
the row helpers the repositories are built on.
"""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Optional, Union

from pocketledger.config import ERROR_MESSAGES, get_db_path

from .exceptions import (
    ConstraintViolation,
    RowDecodeFailure,
    StoreClosedError,
    StoreOpenFailure,
)

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


class ConnectionGuard:
    """
    One SQLite connection behind a mutual-exclusion lock.

    Every statement, or group of statements that must be atomic, runs while
    holding the lock, so callers on different threads never see each other's
    half-finished work. The lock is not re-entrant: code holding it must not
    call back into a repository.
    """

    def __init__(self, db_path: Optional[Union[Path, str]] = None, timeout: float = 10.0):
        """
        Open the ledger database.

        Args:
            db_path: Path to the SQLite database file, or ":memory:".
                Defaults to the configured path (data/ledger.db).
            timeout: Seconds SQLite waits on a file lock held by another process

        Raises:
            StoreOpenFailure: If the file cannot be opened or created
        """
        self.db_path = db_path if db_path is not None else get_db_path()
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = self._open(timeout)

    def _open(self, timeout: float) -> sqlite3.Connection:
        conn = None
        try:
            if str(self.db_path) != MEMORY_DB:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            # isolation_level=None: autocommit, transactions are explicit
            conn = sqlite3.connect(
                str(self.db_path),
                timeout=timeout,
                isolation_level=None,
                check_same_thread=False,
            )
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            # Touch the file so a non-database file fails here, not later
            conn.execute("PRAGMA schema_version").fetchone()
        except (OSError, sqlite3.Error) as e:
            if conn:
                conn.close()
            logger.error(f"Failed to open ledger database: {e}", exc_info=True)
            raise StoreOpenFailure(
                ERROR_MESSAGES["store_open"].format(path=self.db_path)
            ) from e

        logger.debug(f"Ledger database opened: {self.db_path}")
        return conn

    def _require_open(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreClosedError(ERROR_MESSAGES["closed"])
        return self._conn

    @property
    def closed(self) -> bool:
        return self._conn is None

    @contextmanager
    def connection(self):
        """Hold the guard around a single statement in autocommit mode."""
        with self._lock:
            conn = self._require_open()
            try:
                yield conn
            except sqlite3.IntegrityError as e:
                raise ConstraintViolation(str(e)) from e

    @contextmanager
    def transaction(self):
        """Hold the guard around BEGIN ... COMMIT, rolling back on failure."""
        with self._lock:
            conn = self._require_open()
            conn.execute("BEGIN")
            try:
                yield conn
                conn.execute("COMMIT")
            except sqlite3.IntegrityError as e:
                self._rollback(conn)
                raise ConstraintViolation(str(e)) from e
            except Exception:
                self._rollback(conn)
                raise

    @staticmethod
    def _rollback(conn: sqlite3.Connection):
        if conn.in_transaction:
            conn.execute("ROLLBACK")

    def close(self):
        """Close the connection; later use raises StoreClosedError."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                logger.debug(f"Ledger database closed: {self.db_path}")


class BaseRepository:
    """
    Base repository class for the ledger entities.

    Wraps the guarded connection with the fetch and insert helpers every
    entity repository shares.
    """

    entity_name = "row"

    def __init__(self, guard: ConnectionGuard):
        """
        Initialize the base repository.

        Args:
            guard: The shared connection guard
        """
        self.guard = guard

    def _decode(self, row: sqlite3.Row, decode: Callable):
        try:
            return decode(row)
        except (KeyError, TypeError, ValueError) as e:
            row_id = row["id"] if "id" in row.keys() else None
            raise RowDecodeFailure(f"{self.entity_name} {row_id}: {e}") from e

    def _fetch_all(self, sql: str, params: tuple, decode: Callable) -> list:
        """
        Run a query and decode every row.

        Rows that fail to decode are logged and skipped; the rest are returned.
        """
        with self.guard.connection() as conn:
            rows = conn.execute(sql, params).fetchall()

        results = []
        for row in rows:
            try:
                results.append(self._decode(row, decode))
            except RowDecodeFailure as e:
                logger.warning(f"Skipping undecodable {e}")
        return results

    def _fetch_one(self, sql: str, params: tuple, decode: Callable):
        """Run a query for a single row; None if missing or undecodable."""
        with self.guard.connection() as conn:
            row = conn.execute(sql, params).fetchone()

        if row is None:
            return None
        try:
            return self._decode(row, decode)
        except RowDecodeFailure as e:
            logger.warning(f"Ignoring undecodable {e}")
            return None

    def _insert(self, sql: str, params: tuple) -> int:
        """Run a single-row insert and return the stored row id."""
        try:
            with self.guard.connection() as conn:
                cursor = conn.execute(sql, params)
                return cursor.lastrowid
        except ConstraintViolation as e:
            logger.warning(f"Rejected {self.entity_name} insert: {e}")
            raise
        except Exception as e:
            logger.error(f"Error inserting {self.entity_name}: {e}", exc_info=True)
            raise
