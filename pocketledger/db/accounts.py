"""
Accounts repository module.

Handles reading and creating accounts. Balances are stored as given; keeping
them in step with transactions is left to the caller.
"""

import logging
from dataclasses import replace
from typing import Optional

from .base import BaseRepository
from .models import Account
from .schema import ACCOUNT_COLUMNS, column_list, placeholders

logger = logging.getLogger(__name__)

_SELECT_ACCOUNTS = f"SELECT {column_list(ACCOUNT_COLUMNS)} FROM accounts"


class AccountRepository(BaseRepository):
    """Repository for managing accounts."""

    entity_name = "account"

    def list_accounts(self) -> list[Account]:
        """Get every account, ordered by id. Undecodable rows are skipped."""
        return self._fetch_all(
            f"{_SELECT_ACCOUNTS} ORDER BY id", (), Account.from_row
        )

    def get_account(self, account_id: int) -> Optional[Account]:
        """Get an account by ID."""
        return self._fetch_one(
            f"{_SELECT_ACCOUNTS} WHERE id = ?", (account_id,), Account.from_row
        )

    def list_children(self, parent_id: int) -> list[Account]:
        """Get the sub-accounts of an account."""
        return self._fetch_all(
            f"{_SELECT_ACCOUNTS} WHERE parent_id = ? ORDER BY id",
            (parent_id,),
            Account.from_row,
        )

    def insert_account(self, account: Account) -> Account:
        """
        Insert an account.

        Args:
            account: The account to store; ``id`` None lets the store assign one

        Returns:
            The stored account with its ID

        Raises:
            ConstraintViolation: If category_id or parent_id reference
                nothing, or a CHECK constraint fails
        """
        account_id = self._insert(
            f"""
            INSERT INTO accounts ({column_list(ACCOUNT_COLUMNS)})
            VALUES ({placeholders(ACCOUNT_COLUMNS)})
            """,
            account.to_params(),
        )
        logger.info(
            f"Created account '{account.name}' (id: {account_id}, "
            f"virtual: {account.virtual})"
        )
        return replace(account, id=account_id)
