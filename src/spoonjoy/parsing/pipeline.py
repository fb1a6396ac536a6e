"""Two-tier shopping item parsing: AI service first, deterministic parser as fallback."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Awaitable, List, Optional, Protocol, Sequence, Union

from spoonjoy import metrics
from spoonjoy.config import Settings, get_settings
from spoonjoy.models.parsing import ParsedIngredient, ParsedItemDraft, ParseOutcome
from spoonjoy.parsing.llm_client import (
    IngredientLLMClient,
    IngredientParseError,
    build_ingredient_llm_client,
)
from spoonjoy.parsing.quantity import (
    format_number,
    normalize_item_text,
    parse_shopping_item_fallback,
)

logger = logging.getLogger(__name__)

PARSE_FAILED_MESSAGE = "We couldn't parse that automatically. Check the suggested item below."
PARSE_TIMEOUT_MESSAGE = "Parsing took too long. Check the suggested item below."


class IngredientTextParser(Protocol):
    """Anything that turns one line of text into a draft, synchronously or not."""

    def parse(self, text: str) -> Union[ParsedItemDraft, Awaitable[ParsedItemDraft]]:
        ...


class IngredientSource(Protocol):
    async def parse_ingredients(self, text: str) -> List[ParsedIngredient]:
        ...


class AmbiguousParseError(Exception):
    """The AI service found zero or several ingredients in a single line."""

    def __init__(self, candidates: Sequence[ParsedIngredient]) -> None:
        super().__init__(f"expected exactly one ingredient, got {len(candidates)}")
        self.candidates = list(candidates)


class DeterministicParser:
    """Total, synchronous parser; never raises."""

    def parse(self, text: str) -> ParsedItemDraft:
        return parse_shopping_item_fallback(text)


class AIParser:
    """Fallible async parser backed by the AI service.

    Exactly one guess is authoritative; anything else raises ``AmbiguousParseError``.
    """

    def __init__(self, source: IngredientSource) -> None:
        self._source = source

    async def parse(self, text: str) -> ParsedItemDraft:
        guesses = await self._source.parse_ingredients(text)
        if len(guesses) != 1:
            raise AmbiguousParseError(guesses)
        guess = guesses[0]
        return ParsedItemDraft(
            quantity=format_number(guess.quantity),
            unit_name=guess.unit,
            ingredient_name=guess.ingredient_name,
            is_ambiguous=False,
            original_text=text,
        )


async def _resolve(value: Union[ParsedItemDraft, Awaitable[ParsedItemDraft]]) -> ParsedItemDraft:
    if inspect.isawaitable(value):
        return await value
    return value


class ShoppingItemParser:
    """Try the primary parser, fall back to the deterministic one. Never the reverse."""

    def __init__(
        self,
        primary: Optional[IngredientTextParser] = None,
        *,
        fallback: Optional[DeterministicParser] = None,
        timeout: float = 8.0,
    ) -> None:
        self._primary = primary
        self._fallback = fallback or DeterministicParser()
        self._timeout = timeout

    @property
    def has_primary(self) -> bool:
        return self._primary is not None

    async def parse(self, text: str) -> ParseOutcome:
        if self._primary is None or not normalize_item_text(text):
            return self._fallback_outcome(text, result="fallback_only")

        try:
            draft = await asyncio.wait_for(_resolve(self._primary.parse(text)), self._timeout)
        except AmbiguousParseError as exc:
            logger.info(
                "AI parse ambiguous (%s candidates); using fallback parser",
                len(exc.candidates),
            )
            return self._fallback_outcome(text, result="ambiguous", candidates=exc.candidates)
        except asyncio.TimeoutError:
            logger.warning("AI parse timed out after %.1fs; using fallback parser", self._timeout)
            return self._fallback_outcome(text, result="timeout", error=PARSE_TIMEOUT_MESSAGE)
        except IngredientParseError as exc:
            logger.warning("AI parse failed: %s", exc)
            return self._fallback_outcome(text, result="error", error=PARSE_FAILED_MESSAGE)
        except Exception:
            logger.exception("Unexpected AI parser failure")
            return self._fallback_outcome(text, result="error", error=PARSE_FAILED_MESSAGE)

        metrics.INGREDIENT_PARSES.labels(source="ai", result="ok").inc()
        return ParseOutcome(draft=draft, source="ai")

    def _fallback_outcome(
        self,
        text: str,
        *,
        result: str,
        error: Optional[str] = None,
        candidates: Sequence[ParsedIngredient] = (),
    ) -> ParseOutcome:
        draft = self._fallback.parse(text)
        outcome_result = "ambiguous" if draft.is_ambiguous else result
        metrics.INGREDIENT_PARSES.labels(source="fallback", result=outcome_result).inc()
        return ParseOutcome(
            draft=draft,
            source="fallback",
            error=error,
            candidates=list(candidates),
        )


def build_shopping_item_parser(
    settings: Settings | None = None,
    *,
    client: IngredientLLMClient | None = None,
) -> ShoppingItemParser:
    """Assemble the parsing policy from settings; AI parsing is optional."""

    settings = settings or get_settings()
    source = client or build_ingredient_llm_client(settings)
    primary = AIParser(source) if source is not None else None
    return ShoppingItemParser(primary, timeout=settings.ingredient_parse_timeout)


__all__ = [
    "IngredientTextParser",
    "AmbiguousParseError",
    "DeterministicParser",
    "AIParser",
    "ShoppingItemParser",
    "build_shopping_item_parser",
    "PARSE_FAILED_MESSAGE",
    "PARSE_TIMEOUT_MESSAGE",
]
