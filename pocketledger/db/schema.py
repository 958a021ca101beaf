"""
Schema catalog for the ledger database.

Holds the table definitions, the column order used for every projection and
positional insert, and the secondary indexes. The statements are only ever
executed through named migrations (see migrations.py).
"""

from pocketledger.config import (
    DEFAULT_COLOR,
    DEFAULT_CURRENCY,
    DEFAULT_ICON,
    DEFAULT_SCALE,
    DEFAULT_TYPE,
)
from pocketledger.models.enums import (
    PaymentMethod,
    TransactionStatus,
    TransactionType,
    sql_values,
)

# Column order shared by SELECT projections, INSERT binds and to_params()
CATEGORY_COLUMNS = (
    "id",
    "parent_id",
    "name",
    "description",
    "type",
    "color",
    "icon",
)

ACCOUNT_COLUMNS = (
    "id",
    "category_id",
    "parent_id",
    "name",
    "description",
    "type",
    "balance",
    "balance_decimal",
    "virtual",
    "budget",
    "currency",
    "color",
    "icon",
)

TRANSACTION_COLUMNS = (
    "id",
    "category_id",
    "from_account_id",
    "to_account_id",
    "type",
    "status",
    "method",
    "amount",
    "amount_decimal",
    "currency",
    "exchange_rate",
    "date",
    "transaction_date",
    "scheduled_date",
    "description",
    "notes",
    "tags",
    "color",
    "icon",
)

DETAIL_COLUMNS = (
    "id",
    "transaction_id",
    "amount",
    "amount_decimal",
    "description",
    "notes",
    "tags",
    "color",
    "icon",
)

MIGRATION_COLUMNS = ("id", "name", "date")


def column_list(columns, prefix: str = "") -> str:
    """Render a quoted column list, e.g. ``t."id", t."name"``."""
    return ", ".join(f'{prefix}"{column}"' for column in columns)


def placeholders(columns) -> str:
    """Render one ``?`` per column."""
    return ", ".join("?" for _ in columns)


# =============================================================================
# Table definitions
# =============================================================================

MIGRATIONS_TABLE = """
    CREATE TABLE IF NOT EXISTS migrations (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL UNIQUE,
        date TEXT NOT NULL
    )
"""


def category_table(table: str) -> str:
    """Definition of a self-referencing category tree table."""
    return f"""
        CREATE TABLE IF NOT EXISTS {table} (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            parent_id INTEGER REFERENCES {table}(id),
            name TEXT NOT NULL CHECK(length(name) > 0),
            description TEXT,
            type TEXT NOT NULL DEFAULT '{DEFAULT_TYPE}',
            color TEXT NOT NULL DEFAULT '{DEFAULT_COLOR}',
            icon TEXT NOT NULL DEFAULT '{DEFAULT_ICON}'
        )
    """


ACCOUNTS_CATEGORIES_TABLE = category_table("accounts_categories")

TRANSACTIONS_CATEGORIES_TABLE = category_table("transactions_categories")

ACCOUNTS_TABLE = f"""
    CREATE TABLE IF NOT EXISTS accounts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        category_id INTEGER NOT NULL REFERENCES accounts_categories(id),
        parent_id INTEGER REFERENCES accounts(id),
        name TEXT NOT NULL CHECK(length(name) > 0),
        description TEXT,
        type TEXT NOT NULL DEFAULT '{DEFAULT_TYPE}',
        balance INTEGER NOT NULL DEFAULT 0,
        balance_decimal INTEGER NOT NULL DEFAULT {DEFAULT_SCALE}
            CHECK(balance_decimal >= 0),
        "virtual" INTEGER NOT NULL DEFAULT 0 CHECK("virtual" IN (0, 1)),
        budget INTEGER NOT NULL DEFAULT 0 CHECK(budget IN (0, 1)),
        currency TEXT NOT NULL DEFAULT '{DEFAULT_CURRENCY}',
        color TEXT NOT NULL DEFAULT '{DEFAULT_COLOR}',
        icon TEXT NOT NULL DEFAULT '{DEFAULT_ICON}'
    )
"""

TRANSACTIONS_TABLE = f"""
    CREATE TABLE IF NOT EXISTS transactions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        category_id INTEGER NOT NULL REFERENCES transactions_categories(id),
        from_account_id INTEGER REFERENCES accounts(id),
        to_account_id INTEGER REFERENCES accounts(id),
        type TEXT NOT NULL CHECK(type IN ({sql_values(TransactionType)})),
        status TEXT NOT NULL DEFAULT '{TransactionStatus.COMPLETED.value}'
            CHECK(status IN ({sql_values(TransactionStatus)})),
        method TEXT NOT NULL DEFAULT '{PaymentMethod.OTHER.value}'
            CHECK(method IN ({sql_values(PaymentMethod)})),
        amount INTEGER NOT NULL CHECK(amount >= 0),
        amount_decimal INTEGER NOT NULL DEFAULT {DEFAULT_SCALE}
            CHECK(amount_decimal >= 0),
        currency TEXT NOT NULL DEFAULT '{DEFAULT_CURRENCY}',
        exchange_rate REAL NOT NULL DEFAULT 1.0 CHECK(exchange_rate > 0),
        date TEXT NOT NULL,
        transaction_date TEXT NOT NULL,
        scheduled_date TEXT,
        description TEXT,
        notes TEXT,
        tags TEXT,
        color TEXT NOT NULL DEFAULT '{DEFAULT_COLOR}',
        icon TEXT NOT NULL DEFAULT '{DEFAULT_ICON}',
        CHECK(
            type != '{TransactionType.TRANSFER.value}'
            OR (
                from_account_id IS NOT NULL
                AND to_account_id IS NOT NULL
                AND from_account_id != to_account_id
            )
        ),
        CHECK(from_account_id IS NOT NULL OR to_account_id IS NOT NULL)
    )
"""

TRANSACTION_DETAILS_TABLE = f"""
    CREATE TABLE IF NOT EXISTS transaction_details (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        transaction_id INTEGER NOT NULL REFERENCES transactions(id),
        amount INTEGER NOT NULL CHECK(amount >= 0),
        amount_decimal INTEGER NOT NULL DEFAULT {DEFAULT_SCALE}
            CHECK(amount_decimal >= 0),
        description TEXT,
        notes TEXT,
        tags TEXT,
        color TEXT NOT NULL DEFAULT '{DEFAULT_COLOR}',
        icon TEXT NOT NULL DEFAULT '{DEFAULT_ICON}'
    )
"""

# =============================================================================
# Indexes
# =============================================================================

INDEXES = [
    ("idx_accounts_categories_parent_id", "accounts_categories", "parent_id"),
    ("idx_transactions_categories_parent_id", "transactions_categories", "parent_id"),
    ("idx_accounts_category_id", "accounts", "category_id"),
    ("idx_accounts_parent_id", "accounts", "parent_id"),
    ("idx_transactions_category_id", "transactions", "category_id"),
    ("idx_transactions_from_account_id", "transactions", "from_account_id"),
    ("idx_transactions_to_account_id", "transactions", "to_account_id"),
    ("idx_transactions_transaction_date", "transactions", "transaction_date DESC"),
    ("idx_transaction_details_transaction_id", "transaction_details", "transaction_id"),
]

INDEX_STATEMENTS = [
    f"CREATE INDEX IF NOT EXISTS {index_name} ON {table}({columns})"
    for index_name, table, columns in INDEXES
]
