"""Category registry: built-in categories plus the user's custom ones.

Built-ins live in code for the process lifetime and can be neither edited nor
deleted. Custom categories are persisted through the ledger and carry the
``custom_`` id prefix so provenance is visible from the id alone.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from budgetsheet.core.errors import NotFoundError, ProtectedCategoryError
from budgetsheet.db.dal import Ledger
from budgetsheet.models.category import Category, CategoryIn, CategoryUpdateIn
from budgetsheet.models.constants import (
    BUILTIN_CATEGORIES,
    BUILTIN_CATEGORY_IDS,
    CUSTOM_CATEGORY_PREFIX,
    FALLBACK_CATEGORY_ID,
)

_BUILTINS: List[Category] = [Category(**c) for c in BUILTIN_CATEGORIES]
_BUILTIN_BY_ID: Dict[str, Category] = {c.id: c for c in _BUILTINS}


def is_builtin(category_id: str) -> bool:
    return category_id in BUILTIN_CATEGORY_IDS


def builtin_categories() -> List[Category]:
    return list(_BUILTINS)


def fallback_category() -> Category:
    return _BUILTIN_BY_ID[FALLBACK_CATEGORY_ID]


def new_category_id() -> str:
    return f"{CUSTOM_CATEGORY_PREFIX}{uuid.uuid4().hex[:12]}"


class CategoryRegistry:
    def __init__(self, ledger: Ledger):
        self.ledger = ledger
        self._custom: Optional[List[Category]] = None

    def _custom_categories(self) -> List[Category]:
        if self._custom is None:
            self._custom = self.ledger.list_custom_categories()
        return self._custom

    def list_all(self) -> List[Category]:
        return builtin_categories() + list(self._custom_categories())

    def get_by_id(self, category_id: str) -> Category:
        """Return the category or the built-in "other"; never raises."""
        if category_id in _BUILTIN_BY_ID:
            return _BUILTIN_BY_ID[category_id]
        for c in self._custom_categories():
            if c.id == category_id:
                return c
        return fallback_category()

    def exists(self, category_id: str) -> bool:
        return is_builtin(category_id) or any(
            c.id == category_id for c in self._custom_categories()
        )

    def create(self, payload: CategoryIn) -> Category:
        category = Category(
            id=new_category_id(),
            name=payload.name,
            icon=payload.icon,
            color=payload.color,
            is_custom=True,
            created_date=datetime.now(timezone.utc).replace(microsecond=0),
        )
        self.ledger.insert_category(category)
        self._custom = None
        return category

    def update(self, category_id: str, fields: CategoryUpdateIn) -> Category:
        if is_builtin(category_id):
            raise ProtectedCategoryError("built-in categories cannot be edited")
        current = self._find_custom(category_id)
        changes = fields.model_dump(exclude_none=True)
        updated = current.model_copy(update=changes)
        self.ledger.update_category(updated)
        self._custom = None
        return updated

    def delete(self, category_id: str) -> None:
        if is_builtin(category_id):
            raise ProtectedCategoryError("built-in categories cannot be deleted")
        self.ledger.delete_category(category_id)
        self._custom = None

    def _find_custom(self, category_id: str) -> Category:
        for c in self._custom_categories():
            if c.id == category_id:
                return c
        raise NotFoundError(f"category '{category_id}' not found")
