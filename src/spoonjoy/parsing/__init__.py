"""Shopping item text parsing utilities."""

from .debounce import DebouncedParser, build_debounced_parser
from .llm_client import IngredientLLMClient, IngredientParseError, build_ingredient_llm_client
from .pipeline import (
    AIParser,
    AmbiguousParseError,
    DeterministicParser,
    ShoppingItemParser,
    build_shopping_item_parser,
)
from .quantity import (
    format_quantity,
    normalize_scale_factor,
    parse_fraction_token,
    parse_shopping_item_fallback,
    scale_quantity,
)

__all__ = [
    "AIParser",
    "AmbiguousParseError",
    "DebouncedParser",
    "DeterministicParser",
    "IngredientLLMClient",
    "IngredientParseError",
    "ShoppingItemParser",
    "build_debounced_parser",
    "build_ingredient_llm_client",
    "build_shopping_item_parser",
    "format_quantity",
    "normalize_scale_factor",
    "parse_fraction_token",
    "parse_shopping_item_fallback",
    "scale_quantity",
]
