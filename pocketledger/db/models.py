"""
Database models for the pocketledger ledger.

Defines the entities stored in SQLite: category trees, accounts, transactions,
transaction details (split lines) and migration records. Each model converts
to and from database rows and plain dictionaries for the GUI boundary.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from pocketledger.config import (
    DEFAULT_COLOR,
    DEFAULT_CURRENCY,
    DEFAULT_EXCHANGE_RATE,
    DEFAULT_ICON,
    DEFAULT_SCALE,
    DEFAULT_TYPE,
)
from pocketledger.models.enums import (
    CategoryKind,
    PaymentMethod,
    TransactionStatus,
    TransactionType,
)
from pocketledger.models.money import MonetaryValue

from .exceptions import ConstraintViolation

SQLITE_INT_MIN = -(2**63)
SQLITE_INT_MAX = 2**63 - 1
from .schema import CATEGORY_COLUMNS, DETAIL_COLUMNS


def _parse_datetime(value: Any, field_name: str, required: bool = True):
    """Parse an ISO-8601 value (or pass a datetime through)."""
    if value is None:
        if required:
            raise ValueError(f"{field_name} is required")
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        # fromisoformat only accepts a "Z" suffix from Python 3.11
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.fromisoformat(value)
    raise ValueError(f"Invalid {field_name}: {value!r}")


def _as_utc(value: datetime) -> datetime:
    """Return an aware datetime in UTC; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    # Stored as UTC so text order in SQL is chronological order
    return _as_utc(value).isoformat() if value else None


def _money_columns(value: MonetaryValue, field_name: str) -> tuple[int, int]:
    """Storage pair for a value, rejecting magnitudes SQLite cannot hold."""
    amount, amount_decimal = value.to_columns()
    if not SQLITE_INT_MIN <= amount <= SQLITE_INT_MAX:
        raise ConstraintViolation(
            f"{field_name} {value} does not fit in a 64-bit integer column"
        )
    return amount, amount_decimal


def _optional_id(value: Any, field_name: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field_name} must be an integer, got {value!r}")
    return value


def split_tags(tags: Optional[str]) -> set[str]:
    """Split a comma-separated tag string into a set of labels."""
    if not tags:
        return set()
    return {tag.strip() for tag in tags.split(",") if tag.strip()}


@dataclass
class Category:
    """
    A node in one of the two category trees.

    ``parent_id`` is a weak reference to another category of the same kind;
    categories without a parent are roots, and a tree may have many roots.
    """

    id: Optional[int]
    name: str
    parent_id: Optional[int] = None
    description: Optional[str] = None
    type: str = DEFAULT_TYPE
    color: str = DEFAULT_COLOR
    icon: str = DEFAULT_ICON
    kind: CategoryKind = CategoryKind.TRANSACTION

    def __post_init__(self):
        """Normalize the name and kind."""
        if not self.name or not str(self.name).strip():
            raise ValueError("Category name cannot be empty")
        self.name = str(self.name).strip()
        self.type = (self.type or "").strip() or DEFAULT_TYPE
        self.kind = CategoryKind(self.kind)
        self.id = _optional_id(self.id, "id")
        self.parent_id = _optional_id(self.parent_id, "parent_id")
        if self.id is not None and self.id == self.parent_id:
            raise ValueError(f"Category {self.id} cannot be its own parent")

    def to_params(self) -> tuple:
        """Values in CATEGORY_COLUMNS order for a positional insert."""
        return (
            self.id,
            self.parent_id,
            self.name,
            self.description,
            self.type,
            self.color,
            self.icon,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "parent_id": self.parent_id,
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "color": self.color,
            "icon": self.icon,
        }

    @classmethod
    def from_dict(
        cls, data: dict, kind: CategoryKind = CategoryKind.TRANSACTION
    ) -> "Category":
        """Create a Category from a GUI payload, applying defaults."""
        return cls(
            id=data.get("id"),
            name=data.get("name") or "",
            parent_id=data.get("parent_id"),
            description=data.get("description"),
            type=data.get("type") or data.get("_type") or DEFAULT_TYPE,
            color=data.get("color") or DEFAULT_COLOR,
            icon=data.get("icon") or DEFAULT_ICON,
            kind=kind,
        )

    @classmethod
    def from_row(cls, row, kind: CategoryKind = CategoryKind.TRANSACTION) -> "Category":
        """Create a Category from a database row."""
        return cls(**{column: row[column] for column in CATEGORY_COLUMNS}, kind=kind)


@dataclass
class Account:
    """
    Represents an account money moves in and out of.

    ``balance`` is a cached figure maintained by whoever records movements;
    it is not recomputed from transactions here. Virtual accounts (budget
    envelopes and the like) do not hold real-world money.
    """

    id: Optional[int]
    category_id: int
    name: str
    parent_id: Optional[int] = None
    description: Optional[str] = None
    type: str = DEFAULT_TYPE
    balance: Optional[MonetaryValue] = None
    virtual: bool = False
    budget: bool = False
    currency: str = DEFAULT_CURRENCY
    color: str = DEFAULT_COLOR
    icon: str = DEFAULT_ICON

    def __post_init__(self):
        """Normalize the name and make the balance follow the account currency."""
        if not self.name or not str(self.name).strip():
            raise ValueError("Account name cannot be empty")
        self.name = str(self.name).strip()
        self.type = (self.type or "").strip() or DEFAULT_TYPE
        self.id = _optional_id(self.id, "id")
        self.parent_id = _optional_id(self.parent_id, "parent_id")
        if _optional_id(self.category_id, "category_id") is None:
            raise ValueError("Account category_id is required")

        if self.balance is None:
            self.balance = MonetaryValue(0, DEFAULT_SCALE, currency=self.currency)
        elif self.balance.currency != self.currency:
            raise ValueError(
                f"Balance currency {self.balance.currency} does not match "
                f"account currency {self.currency}"
            )
        self.virtual = bool(self.virtual)
        self.budget = bool(self.budget)

    def to_params(self) -> tuple:
        """Values in ACCOUNT_COLUMNS order for a positional insert."""
        balance, balance_decimal = _money_columns(self.balance, "balance")
        return (
            self.id,
            self.category_id,
            self.parent_id,
            self.name,
            self.description,
            self.type,
            balance,
            balance_decimal,
            1 if self.virtual else 0,
            1 if self.budget else 0,
            self.currency,
            self.color,
            self.icon,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "category_id": self.category_id,
            "parent_id": self.parent_id,
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "balance": self.balance.magnitude,
            "balance_decimal": self.balance.scale,
            "virtual": self.virtual,
            "budget": self.budget,
            "currency": self.currency,
            "color": self.color,
            "icon": self.icon,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Account":
        """Create an Account from a GUI payload, applying defaults."""
        currency = data.get("currency") or DEFAULT_CURRENCY
        return cls(
            id=data.get("id"),
            category_id=data.get("category_id"),
            name=data.get("name") or "",
            parent_id=data.get("parent_id"),
            description=data.get("description"),
            type=data.get("type") or DEFAULT_TYPE,
            balance=MonetaryValue.from_columns(
                data.get("balance", 0),
                data.get("balance_decimal", DEFAULT_SCALE),
                currency=currency,
            ),
            virtual=bool(data.get("virtual", False)),
            budget=bool(data.get("budget", False)),
            currency=currency,
            color=data.get("color") or DEFAULT_COLOR,
            icon=data.get("icon") or DEFAULT_ICON,
        )

    @classmethod
    def from_row(cls, row) -> "Account":
        """Create an Account from a database row."""
        if row["virtual"] not in (0, 1) or row["budget"] not in (0, 1):
            raise ValueError("virtual and budget must be stored as 0 or 1")
        return cls(
            id=row["id"],
            category_id=row["category_id"],
            name=row["name"],
            parent_id=row["parent_id"],
            description=row["description"],
            type=row["type"],
            balance=MonetaryValue.from_columns(
                row["balance"], row["balance_decimal"], currency=row["currency"]
            ),
            virtual=bool(row["virtual"]),
            budget=bool(row["budget"]),
            currency=row["currency"],
            color=row["color"],
            icon=row["icon"],
        )


@dataclass
class Transaction:
    """
    Represents one movement of money in the ledger.

    Direction is carried by ``type`` and the account references, so the
    amount is never negative. ``transaction_date`` is when the economic event
    happened, ``date`` when the record was posted, and ``scheduled_date`` is
    only set on pending transactions.
    """

    id: Optional[int]
    category_id: int
    type: TransactionType
    amount: MonetaryValue
    date: datetime
    transaction_date: datetime
    from_account_id: Optional[int] = None
    to_account_id: Optional[int] = None
    status: TransactionStatus = TransactionStatus.COMPLETED
    method: PaymentMethod = PaymentMethod.OTHER
    scheduled_date: Optional[datetime] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[str] = None
    color: str = DEFAULT_COLOR
    icon: str = DEFAULT_ICON

    def __post_init__(self):
        """Coerce enumerated fields and check basic types."""
        self.type = TransactionType(self.type)
        self.status = TransactionStatus(self.status)
        self.method = PaymentMethod(self.method)
        if not isinstance(self.amount, MonetaryValue):
            raise ValueError(f"amount must be a MonetaryValue, got {self.amount!r}")
        self.id = _optional_id(self.id, "id")
        self.from_account_id = _optional_id(self.from_account_id, "from_account_id")
        self.to_account_id = _optional_id(self.to_account_id, "to_account_id")
        if _optional_id(self.category_id, "category_id") is None:
            raise ValueError("Transaction category_id is required")
        for name in ("date", "transaction_date", "scheduled_date"):
            value = getattr(self, name)
            if value is None and name == "scheduled_date":
                continue
            if not isinstance(value, datetime):
                raise ValueError(f"{name} must be a datetime, got {value!r}")
            setattr(self, name, _as_utc(value))

    def validate(self):
        """
        Check the ledger rules a transaction must satisfy before it is stored.

        Raises:
            ConstraintViolation: If a rule is broken
        """
        if self.type == TransactionType.TRANSFER:
            if self.from_account_id is None or self.to_account_id is None:
                raise ConstraintViolation(
                    "A transfer needs both from_account_id and to_account_id"
                )
            if self.from_account_id == self.to_account_id:
                raise ConstraintViolation(
                    "A transfer cannot move money to the same account"
                )
        elif self.from_account_id is None and self.to_account_id is None:
            raise ConstraintViolation(
                f"A {self.type.value} transaction needs at least one account"
            )

        if self.amount.is_negative:
            raise ConstraintViolation(f"Amount cannot be negative: {self.amount}")
        _money_columns(self.amount, "amount")

        if (
            self.scheduled_date is not None
            and self.status != TransactionStatus.PENDING
        ):
            raise ConstraintViolation(
                "scheduled_date is only allowed on pending transactions"
            )

    def tag_set(self) -> set[str]:
        """Labels from the comma-separated ``tags`` field."""
        return split_tags(self.tags)

    def to_params(self) -> tuple:
        """Values in TRANSACTION_COLUMNS order for a positional insert."""
        amount, amount_decimal = _money_columns(self.amount, "amount")
        return (
            self.id,
            self.category_id,
            self.from_account_id,
            self.to_account_id,
            self.type.value,
            self.status.value,
            self.method.value,
            amount,
            amount_decimal,
            self.amount.currency,
            self.amount.exchange_rate,
            _format_datetime(self.date),
            _format_datetime(self.transaction_date),
            _format_datetime(self.scheduled_date),
            self.description,
            self.notes,
            self.tags,
            self.color,
            self.icon,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "category_id": self.category_id,
            "from_account_id": self.from_account_id,
            "to_account_id": self.to_account_id,
            "type": self.type.value,
            "_type": self.type.value,
            "status": self.status.value,
            "method": self.method.value,
            **self.amount.to_dict(),
            "amount_display": self.amount.format(),
            "date": _format_datetime(self.date),
            "transaction_date": _format_datetime(self.transaction_date),
            "scheduled_date": _format_datetime(self.scheduled_date),
            "description": self.description,
            "notes": self.notes,
            "note": self.notes,
            "tags": self.tags,
            "color": self.color,
            "icon": self.icon,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        """
        Create a Transaction from a GUI payload.

        Missing optional fields take their defaults: status completed, method
        other, amount_decimal 2, currency EUR, exchange rate 1.0, and the
        default colour and icon. A missing ``date`` is set to now and a
        missing ``transaction_date`` to ``date``.
        """
        posted = _parse_datetime(data.get("date"), "date", required=False)
        if posted is None:
            posted = datetime.now(timezone.utc)
        occurred = _parse_datetime(
            data.get("transaction_date"), "transaction_date", required=False
        )

        return cls(
            id=data.get("id"),
            category_id=data.get("category_id"),
            type=data.get("type") or data.get("_type"),
            amount=MonetaryValue.from_dict(
                {
                    "amount": data.get("amount"),
                    "amount_decimal": data.get("amount_decimal", DEFAULT_SCALE),
                    "currency": data.get("currency"),
                    "exchange_rate": data.get("exchange_rate", DEFAULT_EXCHANGE_RATE),
                }
            ),
            date=posted,
            transaction_date=occurred or posted,
            from_account_id=data.get("from_account_id"),
            to_account_id=data.get("to_account_id"),
            status=data.get("status") or TransactionStatus.COMPLETED,
            method=data.get("method") or PaymentMethod.OTHER,
            scheduled_date=_parse_datetime(
                data.get("scheduled_date"), "scheduled_date", required=False
            ),
            description=data.get("description"),
            notes=data.get("notes", data.get("note")),
            tags=data.get("tags"),
            color=data.get("color") or DEFAULT_COLOR,
            icon=data.get("icon") or DEFAULT_ICON,
        )

    @classmethod
    def from_row(cls, row) -> "Transaction":
        """Create a Transaction from a database row."""
        return cls(
            id=row["id"],
            category_id=row["category_id"],
            type=row["type"],
            amount=MonetaryValue.from_columns(
                row["amount"],
                row["amount_decimal"],
                currency=row["currency"],
                exchange_rate=row["exchange_rate"],
            ),
            date=_parse_datetime(row["date"], "date"),
            transaction_date=_parse_datetime(
                row["transaction_date"], "transaction_date"
            ),
            from_account_id=row["from_account_id"],
            to_account_id=row["to_account_id"],
            status=row["status"],
            method=row["method"],
            scheduled_date=_parse_datetime(
                row["scheduled_date"], "scheduled_date", required=False
            ),
            description=row["description"],
            notes=row["notes"],
            tags=row["tags"],
            color=row["color"],
            icon=row["icon"],
        )


@dataclass
class TransactionDetail:
    """
    A split line of a transaction.

    The detail amounts of a transaction are expected to add up to its amount,
    but nothing here enforces it. Currency always follows the parent.
    """

    id: Optional[int]
    transaction_id: int
    amount: MonetaryValue
    description: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[str] = None
    color: str = DEFAULT_COLOR
    icon: str = DEFAULT_ICON

    def __post_init__(self):
        if not isinstance(self.amount, MonetaryValue):
            raise ValueError(f"amount must be a MonetaryValue, got {self.amount!r}")
        self.id = _optional_id(self.id, "id")
        self.transaction_id = _optional_id(self.transaction_id, "transaction_id")

    def tag_set(self) -> set[str]:
        return split_tags(self.tags)

    def to_params(self) -> tuple:
        """Values in DETAIL_COLUMNS order for a positional insert."""
        amount, amount_decimal = _money_columns(self.amount, "amount")
        return (
            self.id,
            self.transaction_id,
            amount,
            amount_decimal,
            self.description,
            self.notes,
            self.tags,
            self.color,
            self.icon,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "transaction_id": self.transaction_id,
            "amount": self.amount.magnitude,
            "amount_decimal": self.amount.scale,
            "amount_display": self.amount.format(),
            "description": self.description,
            "notes": self.notes,
            "tags": self.tags,
            "color": self.color,
            "icon": self.icon,
        }

    @classmethod
    def from_row(cls, row) -> "TransactionDetail":
        """
        Create a TransactionDetail from a row joined with its parent's
        ``currency`` and ``exchange_rate`` columns.
        """
        values = {column: row[column] for column in DETAIL_COLUMNS}
        values["amount"] = MonetaryValue.from_columns(
            values["amount"],
            values.pop("amount_decimal"),
            currency=row["currency"],
            exchange_rate=row["exchange_rate"],
        )
        return cls(**values)


@dataclass
class MigrationRecord:
    """A schema migration that has been applied to the store."""

    id: Optional[int]
    name: str
    date: datetime

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {"id": self.id, "name": self.name, "date": self.date.isoformat()}

    @classmethod
    def from_row(cls, row) -> "MigrationRecord":
        """Create a MigrationRecord from a database row."""
        return cls(
            id=row["id"],
            name=row["name"],
            date=datetime.fromisoformat(row["date"]),
        )

