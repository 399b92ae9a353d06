"""Router modules for FastAPI web API."""

from web.routers import analytics, config, deploy, health, pages, short_links

__all__ = ["analytics", "config", "deploy", "health", "pages", "short_links"]
