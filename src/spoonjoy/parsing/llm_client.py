"""Client for the AI ingredient parsing service."""
# mypy: ignore-errors

from __future__ import annotations

import json
import logging
import re
from typing import List, Optional

import httpx
from pydantic import ValidationError

from spoonjoy.config import Settings, get_settings
from spoonjoy.models.parsing import ParsedIngredient

LLM_TIMEOUT = 30.0
MAX_INPUT_CHARS = 2000
_JSON_BLOCK_RE = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)

INGREDIENT_SYSTEM_PROMPT = (
    "You convert free-text shopping list and recipe ingredient lines into structured JSON. "
    "For every ingredient mentioned, return its numeric quantity, a short unit (use \"whole\" "
    "for countable items without a unit) and the ingredient name without the quantity or unit. "
    "Convert fractions and number words to decimals. Do not invent ingredients that are not in "
    "the text. The schema:\n"
    '{\n'
    '  "ingredients": [\n'
    '    {"quantity": number, "unit": "string", "ingredientName": "string"}\n'
    '  ]\n'
    '}\n'
    "Return only JSON."
)

INGREDIENT_USER_PROMPT = "Parse these ingredients:\n```\n{text}\n```"

logger = logging.getLogger(__name__)


class IngredientParseError(RuntimeError):
    """Raised when the AI parsing service fails or returns unusable output."""

    def __init__(self, message: str, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class IngredientLLMClient:
    """Call an OpenAI-compatible chat endpoint to parse ingredient text."""

    def __init__(
        self,
        *,
        base_url: str,
        model: str,
        api_key: Optional[str],
        temperature: float = 0.0,
        max_tokens: int = 400,
        timeout: float = LLM_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._api_key = (api_key or "").strip()
        self._temperature = max(0.0, float(temperature))
        self._max_tokens = max(1, int(max_tokens))
        self._timeout = timeout
        self._transport = transport

    async def parse_ingredients(self, text: str) -> List[ParsedIngredient]:
        """Return every ingredient the service found in ``text`` (possibly none)."""

        if not self._api_key:
            raise IngredientParseError("Ingredient parsing is not configured (missing API key).")

        trimmed = text.strip()
        if not trimmed:
            return []
        if len(trimmed) > MAX_INPUT_CHARS:
            trimmed = trimmed[:MAX_INPUT_CHARS]

        try:
            content = await self._execute_chat(trimmed)
        except IngredientParseError:
            raise
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Ingredient LLM returned status=%s", exc.response.status_code
            )
            raise IngredientParseError(
                f"Ingredient parsing service returned HTTP {exc.response.status_code}.",
                cause=exc,
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Ingredient LLM request failed: %s", exc)
            raise IngredientParseError(
                "Ingredient parsing service is unavailable.", cause=exc
            ) from exc

        json_blob = _extract_json_blob(content)
        try:
            parsed = json.loads(json_blob)
        except json.JSONDecodeError as exc:
            snippet = json_blob.strip().replace("\n", " ")[:200]
            raise IngredientParseError(
                f"Ingredient parsing service returned invalid JSON: payload={snippet}",
                cause=exc,
            ) from exc

        if not isinstance(parsed, dict):
            raise IngredientParseError("Ingredient parsing service returned an unexpected payload.")

        ingredients: List[ParsedIngredient] = []
        for entry in parsed.get("ingredients") or []:
            ingredient = self._coerce_ingredient(entry)
            if ingredient is not None:
                ingredients.append(ingredient)
        return ingredients

    async def _execute_chat(self, text: str) -> str:
        endpoint = self._base_url
        if not endpoint.endswith("/chat/completions"):
            endpoint = f"{endpoint}/chat/completions"
        payload = {
            "model": self._model,
            "temperature": self._temperature,
            "max_tokens": self._max_tokens,
            "response_format": {"type": "json_object"},
            "messages": [
                {"role": "system", "content": INGREDIENT_SYSTEM_PROMPT},
                {"role": "user", "content": INGREDIENT_USER_PROMPT.format(text=text)},
            ],
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.post(endpoint, json=payload, headers=headers)
        response.raise_for_status()
        try:
            body = response.json()
        except ValueError as exc:
            raise IngredientParseError(
                "Ingredient parsing service returned a non-JSON body.", cause=exc
            ) from exc
        choices = body.get("choices") or []
        if not choices:
            raise IngredientParseError("Ingredient parsing service returned no choices.")
        message = choices[0].get("message") or {}
        content = (message.get("content") or "").strip()
        if not content:
            raise IngredientParseError("Ingredient parsing service returned an empty response.")
        return content

    @staticmethod
    def _coerce_ingredient(entry: object) -> ParsedIngredient | None:
        if not isinstance(entry, dict):
            return None
        name = entry.get("ingredientName") or entry.get("ingredient_name") or entry.get("name")
        try:
            return ParsedIngredient(
                quantity=entry.get("quantity"),
                unit=(entry.get("unit") or "").strip(),
                ingredient_name=(name or "").strip(),
            )
        except (ValidationError, TypeError):
            logger.debug("Dropping invalid ingredient guess: %s", entry)
            return None


def _extract_json_blob(text: str) -> str:
    match = _JSON_BLOCK_RE.search(text)
    if match:
        return match.group(1).strip()

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end != -1 and end > start:
        return text[start : end + 1].strip()
    return text.strip()


def build_ingredient_llm_client(settings: Settings | None = None) -> IngredientLLMClient | None:
    """Create an AI parsing client when it is enabled and has an API key."""

    settings = settings or get_settings()
    if not settings.ingredient_llm_enabled:
        return None

    if not settings.openai_api_key:
        logger.debug("Ingredient LLM enabled but no API key configured.")
        return None

    return IngredientLLMClient(
        base_url=settings.ingredient_llm_base_url,
        model=settings.ingredient_llm_model,
        api_key=settings.openai_api_key,
        temperature=settings.ingredient_llm_temperature,
        max_tokens=settings.ingredient_llm_max_tokens,
    )


__all__ = ["IngredientLLMClient", "IngredientParseError", "build_ingredient_llm_client"]
