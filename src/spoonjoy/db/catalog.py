"""Find-or-create helpers for units and ingredient references."""

from __future__ import annotations

import logging
import re
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import IngredientRefORM, UnitORM

logger = logging.getLogger(__name__)


def normalize_name(value: Optional[str]) -> str:
    """Trim, collapse whitespace and lowercase a unit or ingredient name."""

    if not value:
        return ""
    return re.sub(r"\s+", " ", value).strip().lower()


def get_or_create_unit(session: Session, name: Optional[str]) -> Optional[UnitORM]:
    """Return the unit row for ``name``; blank names mean "no unit"."""

    normalized = normalize_name(name)
    if not normalized:
        return None

    unit = session.execute(select(UnitORM).where(UnitORM.name == normalized)).scalar_one_or_none()
    if unit is None:
        unit = UnitORM(name=normalized)
        session.add(unit)
        session.flush()
        logger.debug("Created unit name=%s id=%s", normalized, unit.id)
    return unit


def get_or_create_ingredient(session: Session, name: Optional[str]) -> IngredientRefORM:
    normalized = normalize_name(name)
    if not normalized:
        raise ValueError("Ingredient name is required")

    ingredient = session.execute(
        select(IngredientRefORM).where(IngredientRefORM.name == normalized)
    ).scalar_one_or_none()
    if ingredient is None:
        ingredient = IngredientRefORM(name=normalized)
        session.add(ingredient)
        session.flush()
        logger.debug("Created ingredient ref name=%s id=%s", normalized, ingredient.id)
    return ingredient


__all__ = ["normalize_name", "get_or_create_unit", "get_or_create_ingredient"]
