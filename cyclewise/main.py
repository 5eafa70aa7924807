"""Cyclewise API: FastAPI application entry point.

Run locally:
    uvicorn cyclewise.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cyclewise.config import get_settings
from cyclewise.engine.base import StoreError
from cyclewise.engine.config_loader import get_energy_config
from cyclewise.engine.planner import EventNotFoundError, NoSuggestedSlotError
from cyclewise.middleware.rate_limit import RateLimitMiddleware
from cyclewise.middleware.security import SecurityHeadersMiddleware
from cyclewise.routers import energy, health, planner
from cyclewise.services.database import close_pool, init_pool

# ---------- Logging ----------

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("cyclewise")


# ---------- Lifespan ----------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup / shutdown hooks."""
    settings = get_settings()
    logger.info(
        "Starting Cyclewise API v%s [%s], energy config v%s",
        settings.app_version,
        settings.environment,
        get_energy_config().version,
    )
    await init_pool(settings)
    yield
    await close_pool()
    logger.info("Cyclewise API shut down")


# ---------- Error handlers ----------

def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StoreError)
    async def store_error(request: Request, exc: StoreError) -> JSONResponse:
        logger.error("Store failure on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=503,
            content={"detail": "Could not compute forecast: storage unavailable"},
        )

    @app.exception_handler(EventNotFoundError)
    async def event_not_found(request: Request, exc: EventNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(NoSuggestedSlotError)
    async def no_slot(request: Request, exc: NoSuggestedSlotError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})


# ---------- App factory ----------

def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Cyclewise API",
        description=(
            "Cycle-aware daily energy scores, forecasts and boost "
            "rescheduling suggestions."
        ),
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ---------- Middleware (order matters) ----------

    app.add_middleware(SecurityHeadersMiddleware, settings=settings)
    app.add_middleware(RateLimitMiddleware, settings=settings)

    # CORS added last so it wraps the rest and answers preflight requests
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "Retry-After"],
    )

    register_error_handlers(app)

    # ---------- Health check (outside v1 prefix, always at /health) ----------
    app.include_router(health.router)

    # ---------- API v1 routes ----------
    v1_prefix = "/api/v1"

    app.include_router(energy.router, prefix=v1_prefix)
    app.include_router(planner.router, prefix=v1_prefix)

    return app


app = create_app()
