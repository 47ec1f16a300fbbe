"""
FastAPI application - Main entry point
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from catalog.api.catalog_router import api as catalog_router
from catalog.context import CatalogContext, build_context
from catalog.error_handler import register_error_handlers
from catalog.utils.config_loader import CatalogConfig, configure_logging, load_catalog_config

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    context: CatalogContext = app.state.context
    await context.connect()
    try:
        yield
    finally:
        await context.close()


def create_app(config: Optional[CatalogConfig] = None, context: Optional[CatalogContext] = None) -> FastAPI:
    """
    Build the catalog API around an explicit context.

    Tests pass their own context (in-memory store); ``default_app`` and
    scripts/run_api.py build one from config/catalog_config.yml and the environment.
    """
    if context is None:
        config = config or load_catalog_config()
        context = build_context(config)
    config = context.config

    app = FastAPI(
        title="Catalog API",
        description="Products and categories with live product change notifications",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        ctx: CatalogContext = request.app.state.context
        return {
            "status": "healthy",
            "store": {"backend": ctx.db.backend, "connected": await ctx.db.ping()},
            "subscribers": ctx.bus.subscriber_count,
            "timestamp": datetime.now().isoformat(),
        }

    app.include_router(catalog_router)

    # Static front-end, mounted last so API routes win.
    static_dir = config.server.static_dir
    if static_dir and Path(static_dir).is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
        logger.info("Serving static files from %s", static_dir)

    return app


def default_app() -> FastAPI:
    """App factory for ``uvicorn --factory catalog.api.main:default_app``."""
    config = load_catalog_config()
    configure_logging(config.logging)
    return create_app(config)
