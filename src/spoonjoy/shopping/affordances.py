"""Map ingredient names to display categories and icons."""

from __future__ import annotations

import dataclasses
from typing import Optional, Tuple

CATEGORY_LABELS = {
    "produce": "Produce",
    "protein": "Protein",
    "dairy": "Dairy",
    "pantry": "Pantry",
    "bakery": "Bakery",
    "frozen": "Frozen",
    "spices": "Spices",
    "other": "Other",
}

ICON_LABELS = {
    "leaf": "Leafy greens",
    "carrot": "Vegetable",
    "citrus": "Citrus",
    "apple": "Fruit",
    "drumstick": "Chicken",
    "beef": "Red meat",
    "fish": "Seafood",
    "egg": "Egg",
    "milk": "Dairy",
    "wheat": "Grain",
    "droplets": "Liquid",
    "package": "Packaged",
    "pot": "Spice",
    "sandwich": "Bread",
}

DEFAULT_CATEGORY = "other"
DEFAULT_ICON = "package"
GENERIC_ICON_KEYS = frozenset({"package"})

# First matching rule wins, so more specific phrases ("coconut milk") precede broad ones ("milk").
_KEYWORD_RULES: Tuple[Tuple[Tuple[str, ...], str, str], ...] = (
    (("basil", "cilantro", "parsley", "lettuce", "spinach", "kale", "arugula", "herb"), "produce", "leaf"),
    (("lime", "lemon", "orange", "grapefruit", "citrus"), "produce", "citrus"),
    (
        ("carrot", "onion", "garlic", "tomato", "potato", "broccoli", "cauliflower", "zucchini", "cucumber", "celery"),
        "produce",
        "carrot",
    ),
    (("apple", "banana", "berry", "avocado", "mango"), "produce", "apple"),
    (("chicken", "thigh", "drumstick", "wing"), "protein", "drumstick"),
    (("beef", "steak", "ground beef", "pork", "lamb", "sausage", "turkey"), "protein", "beef"),
    (("salmon", "tuna", "cod", "fish", "shrimp", "prawn"), "protein", "fish"),
    (("egg",), "protein", "egg"),
    (("tofu", "tempeh", "beans", "lentil", "chickpea"), "protein", "package"),
    (("coconut milk",), "pantry", "package"),
    (("flour", "rice", "oat", "pasta", "noodle", "quinoa", "sugar"), "pantry", "wheat"),
    (("oil", "vinegar", "broth", "stock", "water", "soy sauce", "tamari", "sauce"), "pantry", "droplets"),
    (("can", "canned", "jar", "coconut cream"), "pantry", "package"),
    (("milk", "cream", "yogurt", "cheese", "butter", "half and half"), "dairy", "milk"),
    (("bread", "bun", "tortilla", "bagel", "pita"), "bakery", "sandwich"),
    (("frozen",), "frozen", "package"),
    (("salt", "pepper", "cumin", "paprika", "oregano", "thyme", "spice", "seasoning"), "spices", "pot"),
)


@dataclasses.dataclass(frozen=True)
class IngredientAffordance:
    category_key: str
    category_label: str
    icon_key: str
    icon_label: str


def _affordance(category_key: str, icon_key: str) -> IngredientAffordance:
    return IngredientAffordance(
        category_key=category_key,
        category_label=CATEGORY_LABELS[category_key],
        icon_key=icon_key,
        icon_label=ICON_LABELS[icon_key],
    )


def infer_ingredient_affordance(name: str) -> IngredientAffordance:
    """Infer category and icon from keywords in the ingredient name."""

    normalized = (name or "").strip().lower()
    for keywords, category_key, icon_key in _KEYWORD_RULES:
        if any(keyword in normalized for keyword in keywords):
            return _affordance(category_key, icon_key)
    return _affordance(DEFAULT_CATEGORY, DEFAULT_ICON)


def resolve_ingredient_affordance(
    ingredient_name: str,
    category_key: Optional[str] = None,
    icon_key: Optional[str] = None,
) -> IngredientAffordance:
    """Prefer previously resolved keys when valid, otherwise infer from the name.

    A submitted generic icon does not override a more specific inferred one.
    """

    inferred = infer_ingredient_affordance(ingredient_name)
    safe_category = category_key if category_key in CATEGORY_LABELS else inferred.category_key
    submitted_icon = icon_key if icon_key in ICON_LABELS else None
    if submitted_icon and submitted_icon not in GENERIC_ICON_KEYS:
        safe_icon = submitted_icon
    else:
        safe_icon = inferred.icon_key
    return _affordance(safe_category, safe_icon)


def category_label(category_key: Optional[str]) -> Optional[str]:
    if category_key is None:
        return None
    return CATEGORY_LABELS.get(category_key)


def icon_label(icon_key: Optional[str]) -> Optional[str]:
    if icon_key is None:
        return None
    return ICON_LABELS.get(icon_key)


__all__ = [
    "CATEGORY_LABELS",
    "ICON_LABELS",
    "IngredientAffordance",
    "infer_ingredient_affordance",
    "resolve_ingredient_affordance",
    "category_label",
    "icon_label",
]
