"""FastAPI application entry point."""

from __future__ import annotations

import asyncio
import contextlib
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.errors import register_exception_handlers
from .api.routes import buses, distance, health, route_stops, stops
from .cache import TTLCache, run_sweeper
from .config import settings
from .logging_config import setup_logging
from .middleware import RequestIdMiddleware
from .services.distance import DistanceResolver


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.cache = TTLCache(default_ttl=settings.cache_ttl_seconds)
    app.state.resolver = DistanceResolver()
    sweeper = asyncio.create_task(
        run_sweeper(app.state.cache, settings.cache_sweep_interval_seconds)
    )
    try:
        yield
    finally:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper
        app.state.cache.clear()


def create_app() -> FastAPI:
    setup_logging(settings.log_level, service=settings.app_name)
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.add_middleware(RequestIdMiddleware)
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    register_exception_handlers(app)

    # Root endpoint for diagnostics
    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "running",
            "api_prefix": settings.api_prefix,
            "health": f"{settings.api_prefix}/health",
            "docs": "/docs",
        }

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(distance.router, prefix=settings.api_prefix)
    app.include_router(route_stops.router, prefix=settings.api_prefix)
    app.include_router(stops.router, prefix=settings.api_prefix)
    app.include_router(buses.router, prefix=settings.api_prefix)
    return app


app = create_app()
