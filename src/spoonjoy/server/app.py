"""ASGI application for Spoonjoy."""
# mypy: ignore-errors

from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, NoReturn, Optional
from uuid import uuid4

from fastapi import Body, Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError

from spoonjoy import __version__, metrics
from spoonjoy.config import Settings, get_settings
from spoonjoy.db.recipes import DuplicateIngredientError
from spoonjoy.logging_utils import configure_logging as configure_app_logging
from spoonjoy.models.parsing import ParseOutcome
from spoonjoy.models.recipe import RecipeIngredient, RecipeSummary
from spoonjoy.models.shopping import ShoppingList, ShoppingListItem
from spoonjoy.parsing.pipeline import ShoppingItemParser
from spoonjoy.parsing.quantity import parse_fraction_token
from spoonjoy.server import deps

logger = logging.getLogger(__name__)


def _json_safe(value: Any) -> Any:
    """Convert non-serializable values into JSON-safe representations."""

    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return value.hex()
    if isinstance(value, (list, tuple)):
        return [_json_safe(entry) for entry in value]
    if isinstance(value, dict):
        return {key: _json_safe(sub_value) for key, sub_value in value.items()}
    return repr(value)


def _normalize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Ensure validation error payloads can be serialized to JSON."""

    return [{key: _json_safe(value) for key, value in error.items()} for error in errors]


def _raise_for_value_error(exc: ValueError) -> NoReturn:
    message = str(exc)
    if "not found" in message.lower():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message) from exc
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message) from exc


def _configure_logging(settings: Settings) -> None:
    secrets = [settings.api_token or "", settings.openai_api_key or ""]
    configure_app_logging(settings.log_level, settings.log_format, secrets)


def create_app() -> FastAPI:
    """Create and configure a FastAPI application instance."""

    settings = get_settings()
    _configure_logging(settings)

    application = FastAPI(title="Spoonjoy Shopping List", version=__version__)
    logger.debug("Application created with log level %s", settings.log_level)

    if settings.log_requests:
        access_logger = logging.getLogger("spoonjoy.access")

        @application.middleware("http")
        async def log_request_response(request: Request, call_next):
            """Log request/response details without leaking sensitive data."""

            request_id = request.headers.get("X-Request-ID") or uuid4().hex
            request.state.request_id = request_id
            start = perf_counter()
            path = request.url.path
            method = request.method
            try:
                response: Response = await call_next(request)
            except Exception:
                duration_ms = (perf_counter() - start) * 1000
                access_logger.exception(
                    "HTTP %s %s status=500 duration_ms=%.2f",
                    method,
                    path,
                    duration_ms,
                    extra={"request_id": request_id},
                )
                metrics.REQUEST_COUNT.labels(method=method, path=path, status="500").inc()
                metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(
                    duration_ms / 1000.0
                )
                raise

            duration_ms = (perf_counter() - start) * 1000
            response.headers.setdefault("X-Request-ID", request_id)
            access_logger.info(
                "HTTP %s %s status=%s duration_ms=%.2f",
                method,
                path,
                response.status_code,
                duration_ms,
                extra={"request_id": request_id},
            )
            metrics.REQUEST_COUNT.labels(
                method=method,
                path=path,
                status=str(response.status_code),
            ).inc()
            metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000.0)
            return response

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        log_kwargs: dict[str, Any] = {}
        request_id = getattr(request.state, "request_id", None)
        if request_id:
            log_kwargs["extra"] = {"request_id": request_id}

        logger.warning(
            "Validation error on %s %s: %s",
            request.method,
            request.url.path,
            exc.errors(),
            **log_kwargs,
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": _normalize_validation_errors(exc.errors())},
        )

    @application.exception_handler(SQLAlchemyError)
    async def persistence_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.error(
            "Persistence failure on %s %s: %s",
            request.method,
            request.url.path,
            exc.__class__.__name__,
        )
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "detail": "The shopping list could not be saved. Please try again.",
                "error": "persistence_unavailable",
            },
        )

    @application.get("/shopping-list", response_model=ShoppingList, summary="Get shopping list")
    def shopping_list_get(
        owner_id: str = Depends(deps.get_owner_id),
        provider: deps.ShoppingListProvider = Depends(deps.get_shopping_list_provider),
    ) -> ShoppingList:
        return provider(owner_id)

    @application.post(
        "/shopping-list/items",
        response_model=ShoppingListItem,
        status_code=status.HTTP_201_CREATED,
        summary="Add or merge a shopping list item",
    )
    def shopping_list_add(
        payload: ShoppingItemCreateRequest = Body(...),
        auth: None = Depends(deps.require_api_token),
        owner_id: str = Depends(deps.get_owner_id),
        adder: deps.ShoppingItemAdder = Depends(deps.get_shopping_item_adder),
    ) -> ShoppingListItem:
        try:
            return adder(owner_id, payload.to_item_payload())
        except ValueError as exc:
            _raise_for_value_error(exc)

    @application.post(
        "/shopping-list/parse",
        response_model=ParseOutcome,
        summary="Parse free-text shopping entry",
    )
    async def shopping_list_parse(
        payload: ParseRequest = Body(...),
        parser: ShoppingItemParser = Depends(deps.get_shopping_item_parser),
    ) -> ParseOutcome:
        outcome = await parser.parse(payload.text)
        logger.info(
            "Parsed shopping entry source=%s ambiguous=%s",
            outcome.source,
            outcome.draft.is_ambiguous,
            extra={"parse_source": outcome.source},
        )
        return outcome

    @application.post(
        "/shopping-list/from-recipe",
        response_model=ShoppingList,
        summary="Add a recipe's ingredients to the shopping list",
    )
    def shopping_list_from_recipe(
        payload: AddFromRecipeRequest = Body(...),
        auth: None = Depends(deps.require_api_token),
        owner_id: str = Depends(deps.get_owner_id),
        merger: deps.RecipeMerger = Depends(deps.get_recipe_merger),
        provider: deps.ShoppingListProvider = Depends(deps.get_shopping_list_provider),
    ) -> ShoppingList:
        try:
            merger(owner_id, payload.recipe_id, payload.scale_factor)
        except ValueError as exc:
            _raise_for_value_error(exc)
        return provider(owner_id)

    @application.post(
        "/shopping-list/items/{item_id}/toggle",
        response_model=ShoppingListItem,
        summary="Check or uncheck a shopping list item",
    )
    def shopping_list_toggle(
        item_id: int,
        payload: Optional[ToggleRequest] = Body(default=None),
        auth: None = Depends(deps.require_api_token),
        owner_id: str = Depends(deps.get_owner_id),
        toggler: deps.ShoppingItemToggler = Depends(deps.get_shopping_item_toggler),
    ) -> ShoppingListItem:
        checked = payload.checked if payload is not None else None
        try:
            return toggler(owner_id, item_id, checked)
        except ValueError as exc:
            _raise_for_value_error(exc)

    @application.delete(
        "/shopping-list/items/{item_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Remove shopping list item",
    )
    def shopping_list_remove(
        item_id: int,
        auth: None = Depends(deps.require_api_token),
        owner_id: str = Depends(deps.get_owner_id),
        remover: deps.ShoppingItemRemover = Depends(deps.get_shopping_item_remover),
    ) -> None:
        try:
            remover(owner_id, item_id)
        except ValueError as exc:
            _raise_for_value_error(exc)

    @application.post(
        "/shopping-list/clear-completed",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Remove checked items",
    )
    def shopping_list_clear_completed(
        auth: None = Depends(deps.require_api_token),
        owner_id: str = Depends(deps.get_owner_id),
        clearer: deps.ShoppingListClearer = Depends(deps.get_completed_clearer),
    ) -> None:
        clearer(owner_id)

    @application.post(
        "/shopping-list/clear",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Remove every item",
    )
    def shopping_list_clear(
        auth: None = Depends(deps.require_api_token),
        owner_id: str = Depends(deps.get_owner_id),
        clearer: deps.ShoppingListClearer = Depends(deps.get_shopping_list_clearer),
    ) -> None:
        clearer(owner_id)

    @application.get("/recipes", response_model=list[RecipeSummary], summary="List recipes")
    def recipes_list(
        owner_id: str = Depends(deps.get_owner_id),
        provider: deps.RecipeListProvider = Depends(deps.get_recipe_list_provider),
    ) -> list[RecipeSummary]:
        return provider(owner_id)

    @application.post(
        "/recipes/{recipe_id}/ingredients",
        response_model=RecipeIngredient,
        status_code=status.HTTP_201_CREATED,
        summary="Add an ingredient to a recipe",
    )
    def recipe_ingredient_add(
        recipe_id: int,
        payload: RecipeIngredientCreateRequest = Body(...),
        auth: None = Depends(deps.require_api_token),
        adder: deps.RecipeIngredientAdder = Depends(deps.get_recipe_ingredient_adder),
    ) -> RecipeIngredient:
        try:
            return adder(recipe_id, payload.model_dump())
        except DuplicateIngredientError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"field": exc.field, "message": str(exc)},
            ) from exc
        except ValueError as exc:
            _raise_for_value_error(exc)

    @application.get("/metrics")
    def metrics_endpoint() -> Response:
        data = generate_latest()
        return Response(content=data, media_type=CONTENT_TYPE_LATEST)

    return application


class ShoppingItemCreateRequest(BaseModel):
    """Manual add form; the quantity arrives as the raw field text."""

    ingredient_name: str = Field(min_length=1, max_length=255)
    quantity: Optional[str] = Field(default=None, max_length=32)
    unit_name: Optional[str] = Field(default=None, max_length=64)
    category_key: Optional[str] = Field(default=None, max_length=32)
    icon_key: Optional[str] = Field(default=None, max_length=32)

    @field_validator("ingredient_name")
    @classmethod
    def ingredient_name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Ingredient name is required")
        return value.strip()

    @field_validator("quantity")
    @classmethod
    def quantity_is_number(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        if parse_fraction_token(value) is None:
            raise ValueError("Quantity must be a non-negative number")
        return value.strip()

    def to_item_payload(self) -> dict[str, Any]:
        return {
            "ingredient_name": self.ingredient_name,
            "quantity": parse_fraction_token(self.quantity) if self.quantity else None,
            "unit_name": self.unit_name,
            "category_key": self.category_key,
            "icon_key": self.icon_key,
        }


class ParseRequest(BaseModel):
    text: str = Field(max_length=2000)


class AddFromRecipeRequest(BaseModel):
    recipe_id: int
    scale_factor: float = Field(default=1.0)


class ToggleRequest(BaseModel):
    checked: Optional[bool] = None


class RecipeIngredientCreateRequest(BaseModel):
    step_num: int = Field(default=1, ge=1)
    quantity: Optional[float] = Field(default=None)
    unit_name: Optional[str] = Field(default=None)
    ingredient_name: str = Field(min_length=1)


app = create_app()

__all__ = ["app", "create_app"]
