"""FastAPI application entry point."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import call_logs, diagnostics, health, intake, load_requests, metrics, telephony
from .config import settings
from .services.context import Integrations, build_integrations

logger = logging.getLogger(__name__)


def create_app(integrations: Integrations | None = None) -> FastAPI:
    ctx = integrations or build_integrations(settings)
    log_level = ctx.settings.log_level.upper()
    logging.basicConfig(level=log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            ctx.sheets.initialize_sheet()
        except Exception:
            logger.exception("Failed to initialize Google Sheets")
        yield

    app = FastAPI(title=ctx.settings.app_name, root_path="", lifespan=lifespan)
    app.state.integrations = ctx

    if ctx.settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(ctx.settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def log_api_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        if request.url.path.startswith(ctx.settings.api_prefix):
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(f"{request.method} {request.url.path} {response.status_code} in {elapsed_ms:.0f}ms")
        return response

    # Root endpoint for diagnostics
    @app.get("/")
    def root():
        return {
            "service": ctx.settings.app_name,
            "status": "running",
            "api_prefix": ctx.settings.api_prefix,
            "health": f"{ctx.settings.api_prefix}/health",
            "docs": "/docs",
        }

    prefix = ctx.settings.api_prefix
    app.include_router(health.router, prefix=prefix)
    app.include_router(load_requests.router, prefix=prefix)
    app.include_router(intake.router, prefix=prefix)
    app.include_router(call_logs.router, prefix=prefix)
    app.include_router(telephony.router, prefix=prefix)
    app.include_router(diagnostics.router, prefix=prefix)
    app.include_router(metrics.router, prefix=prefix)
    return app


app = create_app()
