"""
Categories repository for the account and transaction category trees.

Both trees share one table layout, so one repository class serves either,
selected by CategoryKind.
"""

import logging
from dataclasses import replace
from typing import Optional

from pocketledger.models.enums import CategoryKind

from .base import BaseRepository, ConnectionGuard
from .models import Category
from .schema import CATEGORY_COLUMNS, column_list, placeholders

logger = logging.getLogger(__name__)


class CategoryRepository(BaseRepository):
    """Repository for one category tree (account or transaction categories)."""

    def __init__(self, guard: ConnectionGuard, kind: CategoryKind):
        super().__init__(guard)
        self.kind = CategoryKind(kind)
        self.table = self.kind.table
        self.entity_name = f"{self.kind.value} category"
        self._select = f"SELECT {column_list(CATEGORY_COLUMNS)} FROM {self.table}"

    def _from_row(self, row) -> Category:
        return Category.from_row(row, kind=self.kind)

    def list_categories(self) -> list[Category]:
        """Get every category of this kind, ordered by id."""
        return self._fetch_all(f"{self._select} ORDER BY id", (), self._from_row)

    def get_category(self, category_id: int) -> Optional[Category]:
        """Get a category by ID."""
        return self._fetch_one(
            f"{self._select} WHERE id = ?", (category_id,), self._from_row
        )

    def list_roots(self) -> list[Category]:
        """Get the categories without a parent."""
        return self._fetch_all(
            f"{self._select} WHERE parent_id IS NULL ORDER BY id", (), self._from_row
        )

    def list_children(self, parent_id: int) -> list[Category]:
        """Get the direct children of a category."""
        return self._fetch_all(
            f"{self._select} WHERE parent_id = ? ORDER BY id",
            (parent_id,),
            self._from_row,
        )

    def insert_category(self, category: Category) -> Category:
        """
        Insert a category.

        Args:
            category: The category to store; ``id`` None lets the store assign one

        Returns:
            The stored category with its ID

        Raises:
            ConstraintViolation: If parent_id does not reference a category
                of the same kind
            ValueError: If the category belongs to the other tree

        Only a direct self-parent is refused (when the Category is built);
        longer parent cycles are not detected.
        """
        if category.kind != self.kind:
            raise ValueError(
                f"Cannot store a {category.kind.value} category in {self.table}"
            )

        category_id = self._insert(
            f"""
            INSERT INTO {self.table} ({column_list(CATEGORY_COLUMNS)})
            VALUES ({placeholders(CATEGORY_COLUMNS)})
            """,
            category.to_params(),
        )
        logger.info(f"Created {self.entity_name} '{category.name}' (id: {category_id})")
        return replace(category, id=category_id)
