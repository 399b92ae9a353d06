"""FastAPI application factory and main app.

This module creates the FastAPI application with all routers and
dependency injection configured.

Web routes are thin proxies to the octomatiz core: collaborators are
built once in the lifespan and stored on ``app.state``.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from octomatiz import __version__
from octomatiz.analytics import ClickRecorder
from octomatiz.config import Settings, get_settings
from octomatiz.db import create_all_tables, get_engine, get_session_factory
from octomatiz.ratelimit import RateLimiter
from octomatiz.storage import SqlKeyValueStore, StorageGate
from web.errors import register_error_handlers
from web.routers import analytics, config, deploy, health, pages, short_links

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager.

    Initializes database tables and the collaborators used by routes on
    startup; closes the outbound HTTP client on shutdown.
    """
    settings: Settings = app.state.settings
    engine = get_engine(settings.db_url)
    create_all_tables(engine)
    session_factory = get_session_factory(engine)

    store = SqlKeyValueStore(session_factory) if settings.kv_enabled else None
    if store is None:
        logger.warning("KV storage disabled, pages cannot be published or served")

    gate = StorageGate(store)
    app.state.session_factory = session_factory
    app.state.gate = gate
    app.state.rate_limiter = RateLimiter()
    app.state.click_recorder = ClickRecorder(gate, session_factory)

    async with httpx.AsyncClient(follow_redirects=False) as client:
        app.state.http_client = client
        yield

    engine.dispose()


def include_routers(application: FastAPI) -> None:
    """Register all routers on an application."""
    application.include_router(health.router, tags=["health"])
    application.include_router(config.router, prefix="/config", tags=["config"])
    application.include_router(deploy.router, prefix="/api", tags=["deploy"])
    application.include_router(
        analytics.router, prefix="/api/analytics", tags=["analytics"]
    )
    application.include_router(pages.router, prefix="/p", tags=["pages"])
    application.include_router(short_links.router, prefix="/s", tags=["short-links"])


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to run with; loaded from the environment if omitted.

    Returns:
        Configured FastAPI application.
    """
    application = FastAPI(
        title="OCTOmatiz API",
        description="Publish small-business landing pages under short slugs "
        "and serve them back with short links",
        version=__version__,
        lifespan=lifespan,
    )
    application.state.settings = settings or get_settings()

    include_routers(application)
    register_error_handlers(application)

    return application


# Create the default application instance
app = create_app()
