"""Shopping list models."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class ShoppingListItem(BaseModel):
    """Single active or tombstoned row on an owner's shopping list."""

    id: int
    shopping_list_id: int
    ingredient_ref_id: int
    ingredient_name: str
    unit_id: Optional[int] = Field(default=None)
    unit_name: Optional[str] = Field(default=None)
    quantity: Optional[float] = Field(default=None, ge=0)
    display_quantity: str = Field(default="")
    checked: bool = Field(default=False)
    checked_at: Optional[datetime] = Field(default=None)
    sort_index: int = Field(default=0, ge=0)
    category_key: Optional[str] = Field(default=None)
    category_label: Optional[str] = Field(default=None)
    icon_key: Optional[str] = Field(default=None)
    icon_label: Optional[str] = Field(default=None)
    deleted_at: Optional[datetime] = Field(default=None)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(frozen=True)

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None


class ShoppingList(BaseModel):
    """An owner's shopping list with its active items in display order."""

    id: int
    owner_id: str
    items: List[ShoppingListItem] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def checked_count(self) -> int:
        return sum(1 for item in self.items if item.checked)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def unchecked_count(self) -> int:
        return len(self.items) - self.checked_count


__all__ = ["ShoppingListItem", "ShoppingList"]
