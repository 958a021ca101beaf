"""
Custom exceptions for the pocketledger persistence layer.
"""


class LedgerError(Exception):
    """Base exception for ledger persistence errors."""
    pass


class StoreOpenFailure(LedgerError):
    """Raised when the ledger database cannot be opened or created."""
    pass


class StoreClosedError(LedgerError):
    """Raised when the ledger connection is used after it was closed."""
    pass


class MigrationFailure(LedgerError):
    """Raised when a schema migration cannot be applied."""

    def __init__(self, name: str, message: str):
        super().__init__(f"Migration '{name}' failed: {message}")
        self.name = name


class ConstraintViolation(LedgerError):
    """Raised when a write breaks a foreign-key, CHECK or ledger rule."""
    pass


class RowDecodeFailure(LedgerError):
    """Raised when a stored row cannot be decoded into an entity."""
    pass
