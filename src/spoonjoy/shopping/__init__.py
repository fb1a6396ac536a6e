"""Shopping list presentation and interaction helpers."""

from .affordances import (
    IngredientAffordance,
    infer_ingredient_affordance,
    resolve_ingredient_affordance,
)
from .optimistic import OptimisticOverrides, ReconciledView, reconcile, revert
from .ordering import compute_sort_order, display_sort_key, sort_for_display
from .swipe import (
    SwipeAction,
    SwipeState,
    SwipeTracker,
    resolve_swipe_action,
    should_delete_on_swipe,
)

__all__ = [
    "IngredientAffordance",
    "infer_ingredient_affordance",
    "resolve_ingredient_affordance",
    "OptimisticOverrides",
    "ReconciledView",
    "reconcile",
    "revert",
    "compute_sort_order",
    "display_sort_key",
    "sort_for_display",
    "SwipeAction",
    "SwipeState",
    "SwipeTracker",
    "resolve_swipe_action",
    "should_delete_on_swipe",
]
