"""SQLAlchemy models representing Spoonjoy persistence tables."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Declarative base class for Spoonjoy ORM models."""


class UnitORM(Base):
    """Measurement unit, stored lowercased so lookups are case-insensitive."""

    __tablename__ = "units"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)


class IngredientRefORM(Base):
    """Canonical ingredient name shared by recipes and shopping lists."""

    __tablename__ = "ingredient_refs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)


class ShoppingListORM(Base):
    """One shopping list per owner."""

    __tablename__ = "shopping_lists"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    items: Mapped[List["ShoppingListItemORM"]] = relationship(back_populates="shopping_list")


class ShoppingListItemORM(Base):
    """Shopping list row keyed by (list, unit, ingredient)."""

    __tablename__ = "shopping_list_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    shopping_list_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("shopping_lists.id", ondelete="CASCADE"), nullable=False
    )
    unit_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("units.id"), nullable=True
    )
    ingredient_ref_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("ingredient_refs.id"), nullable=False
    )
    quantity: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    checked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    checked_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    sort_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    category_key: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    icon_key: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    shopping_list: Mapped[ShoppingListORM] = relationship(back_populates="items")
    unit: Mapped[Optional[UnitORM]] = relationship()
    ingredient_ref: Mapped[IngredientRefORM] = relationship()

    __table_args__ = (
        UniqueConstraint(
            "shopping_list_id",
            "unit_id",
            "ingredient_ref_id",
            name="uq_shopping_list_items_identity",
        ),
        Index(
            "uq_shopping_list_items_identity_no_unit",
            "shopping_list_id",
            "ingredient_ref_id",
            unique=True,
            sqlite_where=text("unit_id IS NULL"),
        ),
        Index(
            "ix_shopping_list_items_list_deleted_sort",
            "shopping_list_id",
            "deleted_at",
            "sort_index",
        ),
    )


class RecipeORM(Base):
    """Recipe header; only the fields the shopping list reads are modelled."""

    __tablename__ = "recipes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )

    steps: Mapped[List["RecipeStepORM"]] = relationship(
        back_populates="recipe",
        order_by="RecipeStepORM.step_num",
        cascade="all, delete-orphan",
    )
    ingredients: Mapped[List["RecipeIngredientORM"]] = relationship(
        back_populates="recipe",
        order_by="RecipeIngredientORM.id",
        cascade="all, delete-orphan",
    )


class RecipeStepORM(Base):
    """Ordered recipe step."""

    __tablename__ = "recipe_steps"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    recipe_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )
    step_num: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    recipe: Mapped[RecipeORM] = relationship(back_populates="steps")

    __table_args__ = (UniqueConstraint("recipe_id", "step_num", name="uq_recipe_steps_num"),)


class RecipeIngredientORM(Base):
    """Ingredient declared by a recipe step."""

    __tablename__ = "recipe_ingredients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    recipe_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )
    step_num: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    unit_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("units.id"), nullable=True
    )
    ingredient_ref_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("ingredient_refs.id"), nullable=False
    )

    recipe: Mapped[RecipeORM] = relationship(back_populates="ingredients")
    unit: Mapped[Optional[UnitORM]] = relationship()
    ingredient_ref: Mapped[IngredientRefORM] = relationship()


__all__ = [
    "Base",
    "UnitORM",
    "IngredientRefORM",
    "ShoppingListORM",
    "ShoppingListItemORM",
    "RecipeORM",
    "RecipeStepORM",
    "RecipeIngredientORM",
]
