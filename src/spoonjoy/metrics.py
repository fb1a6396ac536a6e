"""Prometheus metrics definitions for Spoonjoy."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "spoonjoy_http_requests_total",
    "Total number of HTTP requests processed by the Spoonjoy API",
    ["method", "path", "status"],
)

REQUEST_LATENCY = Histogram(
    "spoonjoy_http_request_duration_seconds",
    "Latency of HTTP requests processed by the Spoonjoy API",
    ["method", "path"],
)

INGREDIENT_PARSES = Counter(
    "spoonjoy_ingredient_parses_total",
    "Shopping item parse attempts by parser source and result",
    ["source", "result"],
)

SHOPPING_MUTATIONS = Counter(
    "spoonjoy_shopping_mutations_total",
    "Shopping list mutations applied by operation",
    ["operation"],
)

__all__ = [
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "INGREDIENT_PARSES",
    "SHOPPING_MUTATIONS",
]
