"""Dependency providers for FastAPI route handlers.

Every collaborator a handler needs (settings, storage gate, HTTP client,
rate limiter, click recorder, database sessions) is created once in the
application lifespan, kept on ``app.state`` and handed to handlers through
these providers. Handlers never look collaborators up from globals.

Transaction boundaries for ``get_db`` are managed here:
- Session is created at request start
- On success (no exception): session is committed automatically
- On exception: session is rolled back automatically
- Session is closed after request completes
"""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

import httpx
from fastapi import Depends, Request
from sqlalchemy.orm import Session, sessionmaker

from octomatiz.analytics import ClickRecorder
from octomatiz.config import Settings
from octomatiz.ratelimit import RateLimiter
from octomatiz.storage import StorageGate


def get_app_settings(request: Request) -> Settings:
    """Get the settings the application was created with."""
    settings: Any = request.app.state.settings
    return settings  # type: ignore[no-any-return]


def get_gate(request: Request) -> StorageGate:
    """Get the storage gate from app state."""
    gate: Any = request.app.state.gate
    return gate  # type: ignore[no-any-return]


def get_http_client(request: Request) -> httpx.AsyncClient | None:
    """Get the outbound HTTP client, if one is configured."""
    return getattr(request.app.state, "http_client", None)


def get_rate_limiter(request: Request) -> RateLimiter:
    """Get the rate limiter from app state."""
    limiter: Any = request.app.state.rate_limiter
    return limiter  # type: ignore[no-any-return]


def get_click_recorder(request: Request) -> ClickRecorder:
    """Get the click recorder from app state."""
    recorder: Any = request.app.state.click_recorder
    return recorder  # type: ignore[no-any-return]


def get_session_factory(request: Request) -> sessionmaker[Session]:
    """Get session factory from app state.

    Args:
        request: FastAPI request object.

    Returns:
        SQLAlchemy session factory.
    """
    factory: Any = request.app.state.session_factory
    return factory  # type: ignore[no-any-return]


def get_db(
    session_factory: sessionmaker[Session] = Depends(get_session_factory),
) -> Generator[Session, None, None]:
    """Provide a database session for a request.

    Yields:
        Database session.
    """
    session = session_factory()
    try:
        yield session
        # Commit on success - only reached if no exception was raised
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def public_base_url(request: Request, settings: Settings) -> str:
    """Return the base URL published links are built on."""
    if settings.public_base_url:
        return settings.public_base_url.rstrip("/")
    return str(request.base_url).rstrip("/")
