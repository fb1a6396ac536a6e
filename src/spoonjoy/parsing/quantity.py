"""Deterministic quantity/unit parser and kitchen-fraction helpers.

Anything the fallback parser cannot split into amount, unit and ingredient comes back
as an ambiguous draft for the user to confirm.
"""

from __future__ import annotations

import math
import re
from fractions import Fraction
from typing import Optional

from spoonjoy.models.parsing import ParsedItemDraft

DEFAULT_UNIT = "whole"
DOZEN_QUANTITY = "12"

_WHITESPACE_RE = re.compile(r"\s+")
_DOZEN_RE = re.compile(r"^an?\s+dozen\s+(.+)$", re.IGNORECASE)
_MIXED_RE = re.compile(r"^(\d+)\s+(\d+)/(\d+)$")
_FRACTION_RE = re.compile(r"^(\d+)/(\d+)$")
_NUMBER_RE = re.compile(r"^(?:\d+(?:\.\d+)?|\.\d+)$")
_LEADING_AMOUNT_RE = re.compile(
    r"^(\d+\s+\d+/\d+|\d+/\d+|\d+(?:\.\d+)?|\.\d+)\s+(.+)$"
)

UNICODE_FRACTIONS = {
    "1/2": "½",
    "1/3": "⅓",
    "2/3": "⅔",
    "1/4": "¼",
    "3/4": "¾",
    "1/5": "⅕",
    "2/5": "⅖",
    "3/5": "⅗",
    "4/5": "⅘",
    "1/6": "⅙",
    "5/6": "⅚",
    "1/8": "⅛",
    "3/8": "⅜",
    "5/8": "⅝",
    "7/8": "⅞",
}

_THIRDS = (1, 2, 4, 5, 7, 8)
_SIXTHS = (1, 5, 7, 11)


def normalize_item_text(text: Optional[str]) -> str:
    """Trim and collapse internal whitespace runs to single spaces."""

    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


def parse_fraction_token(token: Optional[str]) -> Optional[float]:
    """Convert ``"1 1/2"``, ``"3/4"`` or ``"2"`` to a float, or ``None`` when invalid."""

    value = normalize_item_text(token)
    if not value:
        return None

    result: Optional[float] = None
    if match := _MIXED_RE.match(value):
        whole, numerator, denominator = (int(group) for group in match.groups())
        if denominator <= 0:
            return None
        result = whole + numerator / denominator
    elif match := _FRACTION_RE.match(value):
        numerator, denominator = (int(group) for group in match.groups())
        if denominator <= 0:
            return None
        result = numerator / denominator
    elif _NUMBER_RE.match(value):
        result = float(value)

    if result is None or not math.isfinite(result):
        return None
    return result


def format_number(value: float) -> str:
    """Render a parsed quantity the way it is echoed back into an editable field."""

    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _ambiguous(text: str, original_text: str) -> ParsedItemDraft:
    return ParsedItemDraft(
        quantity="",
        unit_name="",
        ingredient_name=text,
        is_ambiguous=True,
        original_text=original_text,
    )


def parse_shopping_item_fallback(text: Optional[str]) -> ParsedItemDraft:
    """Split one free-text line into quantity, unit and ingredient.

    Never raises. Input without a recognisable leading amount becomes an ambiguous
    draft whose ingredient name is the whole normalized line.
    """

    original_text = text or ""
    normalized = normalize_item_text(original_text)
    if not normalized:
        return _ambiguous("", original_text)

    if dozen := _DOZEN_RE.match(normalized):
        return ParsedItemDraft(
            quantity=DOZEN_QUANTITY,
            unit_name=DEFAULT_UNIT,
            ingredient_name=dozen.group(1).strip(),
            is_ambiguous=False,
            original_text=original_text,
        )

    leading = _LEADING_AMOUNT_RE.match(normalized)
    if leading is None:
        return _ambiguous(normalized, original_text)

    amount_token, remainder = leading.group(1), leading.group(2).strip()
    quantity = parse_fraction_token(amount_token)
    if quantity is None or not remainder:
        return _ambiguous(normalized, original_text)

    head, _, tail = remainder.partition(" ")
    if not tail:
        unit_name, ingredient_name = DEFAULT_UNIT, head
    else:
        unit_name, ingredient_name = head, tail

    return ParsedItemDraft(
        quantity=amount_token,
        unit_name=unit_name,
        ingredient_name=ingredient_name,
        is_ambiguous=False,
        original_text=original_text,
    )


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def round_to_kitchen_fraction(value: float) -> Fraction:
    """Snap a positive value to eighths, thirds or sixths, preferring clean eighths."""

    eighths = _round_half_up(value * 8)
    if abs(value - eighths / 8) < 0.02:
        return Fraction(eighths, 8)

    for numerator in _THIRDS:
        if abs(value - numerator / 3) < 0.05:
            return Fraction(numerator, 3)

    for numerator in _SIXTHS:
        if abs(value - numerator / 6) < 0.03:
            return Fraction(numerator, 6)

    return Fraction(eighths, 8)


def format_quantity(quantity: Optional[float]) -> str:
    """Format a quantity with Unicode kitchen fractions, e.g. ``1.5`` -> ``"1 ½"``."""

    if quantity is None or math.isnan(quantity) or math.isinf(quantity):
        return ""

    negative = quantity < 0
    fraction = round_to_kitchen_fraction(abs(quantity))
    if fraction == 0:
        return "0"

    whole, remainder = divmod(fraction.numerator, fraction.denominator)
    if remainder == 0:
        rendered = str(whole)
    else:
        key = f"{remainder}/{fraction.denominator}"
        glyph = UNICODE_FRACTIONS.get(key, key)
        rendered = glyph if whole == 0 else f"{whole} {glyph}"

    return f"-{rendered}" if negative else rendered


def normalize_scale_factor(value: object) -> float:
    """Return ``value`` as a positive finite multiplier, defaulting to 1."""

    try:
        factor = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 1.0
    if not math.isfinite(factor) or factor <= 0:
        return 1.0
    return factor


def scale_quantity(quantity: Optional[float], scale_factor: object) -> Optional[float]:
    if quantity is None:
        return None
    return quantity * normalize_scale_factor(scale_factor)


__all__ = [
    "DEFAULT_UNIT",
    "normalize_item_text",
    "parse_fraction_token",
    "parse_shopping_item_fallback",
    "format_number",
    "format_quantity",
    "round_to_kitchen_fraction",
    "normalize_scale_factor",
    "scale_quantity",
]
