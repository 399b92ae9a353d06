"""FastAPI web application for OCTOmatiz.

This module provides the HTTP API over the publication pipeline:
deploy, page serving, short link redirects and click analytics.

All business logic is delegated to core modules in octomatiz/.
"""

from web.app import app, create_app

__all__ = ["app", "create_app"]
