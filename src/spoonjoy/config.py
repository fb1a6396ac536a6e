"""Application configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_FILE_CANDIDATES = (Path(".env"), Path(".env.local"))


class Settings(BaseModel):
    """Global application settings loaded from environment variables or .env files."""

    database_path: Path = Field(
        default=Path("./data/spoonjoy.db"),
        description="SQLite database location.",
    )
    api_token: Optional[str] = Field(
        default=None,
        description="Bearer token required for mutating endpoints.",
    )
    default_owner_id: str = Field(
        default="default",
        description="Owner id used when requests do not carry an X-Owner-ID header.",
    )
    log_level: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        default="plain",
        description="Logging format (plain/json).",
    )
    log_requests: bool = Field(
        default=True,
        description="Emit request access logs when true.",
    )
    ingredient_llm_enabled: bool = Field(
        default=False,
        description="Parse free-text shopping entries with the AI service when true.",
    )
    ingredient_llm_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="OpenAI-compatible base URL for ingredient parsing.",
    )
    ingredient_llm_model: str = Field(
        default="gpt-4o-mini",
        description="Model identifier passed to the ingredient parsing endpoint.",
    )
    ingredient_llm_temperature: float = Field(
        default=0.0,
        description="Sampling temperature for ingredient parsing.",
    )
    ingredient_llm_max_tokens: int = Field(
        default=400,
        description="Max tokens for ingredient parsing responses.",
    )
    openai_api_key: Optional[str] = Field(
        default=None,
        description="API key sent to the ingredient parsing service.",
    )
    ingredient_parse_timeout: float = Field(
        default=8.0,
        description="Seconds to wait for the AI parser before using the fallback parser.",
    )
    parse_debounce_seconds: float = Field(
        default=1.0,
        description="Quiet period before a debounced parse runs.",
    )

    model_config = ConfigDict(frozen=True)


def _coerce_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_env_file(path: Path) -> dict[str, str]:
    payload: dict[str, str] = {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, raw_value = line.split("=", 1)
                payload[key.strip()] = raw_value.strip()
    except FileNotFoundError:
        return {}
    return payload


def _load_env_file_values() -> dict[str, str]:
    values: dict[str, str] = {}
    for candidate in ENV_FILE_CANDIDATES:
        values.update(_parse_env_file(candidate))
    return values


def _load_from_env() -> dict[str, object]:
    """Load optional overrides from env vars (with .env fallbacks)."""

    file_values = _load_env_file_values()

    def _env(key: str) -> Optional[str]:
        return os.environ.get(key) or file_values.get(key)

    payload: dict[str, object] = {}
    if (db_path := _env("SPOONJOY_DATABASE_PATH")):
        payload["database_path"] = Path(db_path)
    if (api_token := _env("SPOONJOY_API_TOKEN")):
        payload["api_token"] = api_token
    if (owner_id := _env("SPOONJOY_DEFAULT_OWNER_ID")):
        payload["default_owner_id"] = owner_id
    if (log_level := _env("SPOONJOY_LOG_LEVEL")):
        payload["log_level"] = log_level
    if (log_format := _env("SPOONJOY_LOG_FORMAT")):
        payload["log_format"] = log_format
    if (log_requests := _env("SPOONJOY_LOG_REQUESTS")):
        payload["log_requests"] = _coerce_bool(log_requests)
    if (llm_enabled := _env("SPOONJOY_INGREDIENT_LLM_ENABLED")):
        payload["ingredient_llm_enabled"] = _coerce_bool(llm_enabled)
    if (llm_base_url := _env("SPOONJOY_INGREDIENT_LLM_BASE_URL")):
        payload["ingredient_llm_base_url"] = llm_base_url
    if (llm_model := _env("SPOONJOY_INGREDIENT_LLM_MODEL")):
        payload["ingredient_llm_model"] = llm_model
    if (llm_temperature := _env("SPOONJOY_INGREDIENT_LLM_TEMPERATURE")):
        try:
            payload["ingredient_llm_temperature"] = float(llm_temperature)
        except ValueError:
            pass
    if (llm_max_tokens := _env("SPOONJOY_INGREDIENT_LLM_MAX_TOKENS")):
        try:
            payload["ingredient_llm_max_tokens"] = int(llm_max_tokens)
        except ValueError:
            pass
    if (api_key := _env("SPOONJOY_OPENAI_API_KEY") or _env("OPENAI_API_KEY")):
        payload["openai_api_key"] = api_key
    if (parse_timeout := _env("SPOONJOY_INGREDIENT_PARSE_TIMEOUT")):
        try:
            payload["ingredient_parse_timeout"] = float(parse_timeout)
        except ValueError:
            pass
    if (debounce := _env("SPOONJOY_PARSE_DEBOUNCE_SECONDS")):
        try:
            payload["parse_debounce_seconds"] = float(debounce)
        except ValueError:
            pass
    return payload


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings(**_load_from_env())
