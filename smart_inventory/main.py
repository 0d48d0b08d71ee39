"""
Smart Inventory Main Application
"""

import logging
from contextlib import asynccontextmanager

from .config import settings

# ── Logging ───────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("SmartInventory")

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import auth
from .api import ai_routes, alerts_routes, inventory_routes, pos_routes
from .constants import Messages
from .context import build_context
from .database import SessionLocal, init_db
from .exceptions import SmartInventoryException
from .middleware.monitoring import PrometheusMiddleware, get_metrics
from .middleware.rate_limit import limiter

# --- Error Tracking ---
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        integrations=[FastApiIntegration()],
        environment=settings.ENVIRONMENT,
        traces_sample_rate=1.0,
    )


@asynccontextmanager
async def lifespan(app):
    settings.print_startup_summary()
    init_db()

    # Tests install their own context before startup
    if getattr(app.state, "context", None) is None:
        app.state.context = build_context(SessionLocal)
    app.state.context.alert_board.refresh()
    logger.info("Alert board attached to inventory change feed")

    yield

    app.state.context.close()


# --- App Initialization ---
app = FastAPI(
    title="Smart Inventory API",
    version="1.0.0",
    description="Bar & restaurant inventory with low-stock alerts, POS sync and an AI assistant",
    lifespan=lifespan,
)
app.state.limiter = limiter

# 1. Prometheus Middleware
app.add_middleware(PrometheusMiddleware)

# 2. CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Exception Handlers ---

@app.exception_handler(SmartInventoryException)
async def smart_inventory_exception_handler(request: Request, exc: SmartInventoryException):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    content = {"success": False, "error": exc.message}
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(content, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(p) for p in err.get("loc", []) if p != "body"), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse({"success": False, "error": Messages.VALIDATION, "details": details}, status_code=400)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"Rate limit hit on {request.url.path} from {request.client.host if request.client else '?'}")
    return JSONResponse(
        {"success": False, "error": Messages.RATE_LIMITED, "details": {"limit": exc.detail}},
        status_code=429,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    error = "Endpoint not found" if exc.status_code == 404 and exc.detail == "Not Found" else exc.detail
    return JSONResponse({"success": False, "error": error}, status_code=exc.status_code)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse({"success": False, "error": Messages.SERVER}, status_code=500)


# --- Routes ---

@app.get("/api/health")
def health_check():
    """Health check for load balancers."""
    ctx = getattr(app.state, "context", None)
    return {
        "status": "ok",
        "environment": settings.ENVIRONMENT,
        "aiConfigured": bool(ctx and ctx.llm.configured),
        "alerts": ctx.alert_board.counts() if ctx else None,
    }


@app.get("/metrics")
def metrics():
    return get_metrics()


app.include_router(auth.router)
app.include_router(inventory_routes.router)
app.include_router(alerts_routes.router)
app.include_router(ai_routes.router)
app.include_router(pos_routes.router)
