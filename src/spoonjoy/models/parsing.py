"""Data contracts produced by the shopping item parsers."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ParseSource = Literal["ai", "fallback"]


class ParsedItemDraft(BaseModel):
    """Editable draft of one shopping entry; never persisted."""

    quantity: str = Field(default="")
    unit_name: str = Field(default="")
    ingredient_name: str = Field(default="")
    is_ambiguous: bool = Field(default=False)
    original_text: str = Field(default="")

    model_config = ConfigDict(frozen=True)


class ParsedIngredient(BaseModel):
    """One structured guess returned by the AI parsing service."""

    quantity: float = Field(gt=0)
    unit: str = Field(min_length=1, max_length=64)
    ingredient_name: str = Field(min_length=1, max_length=255)

    model_config = ConfigDict(frozen=True)


class ParseOutcome(BaseModel):
    draft: ParsedItemDraft
    source: ParseSource
    error: Optional[str] = Field(default=None)
    candidates: List[ParsedIngredient] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


__all__ = ["ParseSource", "ParsedItemDraft", "ParsedIngredient", "ParseOutcome"]
