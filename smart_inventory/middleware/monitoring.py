"""
Monitoring Middleware and Prometheus instrumentation for Smart Inventory.

Captures request latencies, status codes, stock movements and LLM usage.
"""

import time
import logging
from typing import Callable
from fastapi import Request, Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

# --- Metrics Definition ---

try:
    REQUEST_COUNT = Counter(
        "api_request_total",
        "Total count of HTTP requests",
        ["method", "path", "status_code"]
    )

    REQUEST_LATENCY = Histogram(
        "api_request_latency_seconds",
        "Latency of HTTP requests in seconds",
        ["method", "path"]
    )

    LLM_INVOCATIONS = Counter(
        "llm_invocations_total",
        "Total count of chat completion calls",
        ["model", "outcome"]  # outcome: ok, error
    )

    LLM_TOKENS = Counter(
        "llm_tokens_total",
        "Total tokens consumed",
        ["model"]
    )

    STOCK_MOVEMENTS = Counter(
        "inventory_stock_movements_total",
        "Stock delta operations",
        ["action"]
    )
except ValueError:
    # Metrics already registered (module re-imported)
    from prometheus_client import REGISTRY
    REQUEST_COUNT = REGISTRY._names_to_collectors["api_request_total"]
    REQUEST_LATENCY = REGISTRY._names_to_collectors["api_request_latency_seconds"]
    LLM_INVOCATIONS = REGISTRY._names_to_collectors["llm_invocations_total"]
    LLM_TOKENS = REGISTRY._names_to_collectors["llm_tokens_total"]
    STOCK_MOVEMENTS = REGISTRY._names_to_collectors["inventory_stock_movements_total"]


# --- Middleware Implementation ---

class PrometheusMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Don't monitor /metrics itself
        if request.url.path.rstrip("/") == "/metrics":
            return await call_next(request)

        method = request.method
        # Route template keeps label cardinality bounded (/api/inventory/{item_id})
        route = request.scope.get("route")
        start_time = time.time()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            route = request.scope.get("route", route)
        finally:
            latency = time.time() - start_time
            path = getattr(route, "path", request.url.path)
            REQUEST_COUNT.labels(method=method, path=path, status_code=status_code).inc()
            REQUEST_LATENCY.labels(method=method, path=path).observe(latency)

        return response


# --- Helper functions ---

def get_metrics():
    """Generates the latest metrics scrapable by Prometheus."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


def instrument_llm_call(model: str, tokens: int, ok: bool):
    """Update Prometheus metrics for a chat completion call."""
    LLM_INVOCATIONS.labels(model=model, outcome="ok" if ok else "error").inc()
    if tokens:
        LLM_TOKENS.labels(model=model).inc(tokens)
    logger.debug(f"Metrics updated: {model}, tokens={tokens}, ok={ok}")


def instrument_stock_movement(action: str):
    STOCK_MOVEMENTS.labels(action=action).inc()
