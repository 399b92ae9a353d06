"""Global exception handlers.

Failures never reach the client as a stack trace or a framework default
page: page routes get the branded error page, API routes get a JSON
envelope with ``success: false``.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, Response

from octomatiz.error_pages import GENERIC, render_error_page

logger = logging.getLogger(__name__)


def error_envelope(message: str, error_code: str | None = None) -> dict[str, object]:
    """Build the JSON body of a failed API call."""
    body: dict[str, object] = {"success": False, "error": message}
    if error_code is not None:
        body["errorCode"] = error_code
    return body


def register_error_handlers(app: FastAPI) -> None:
    """Register the validation and catch-all handlers on the app."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> Response:
        logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_envelope("Permintaan tidak valid"),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> Response:
        logger.exception("Unhandled error on %s", request.url.path, exc_info=exc)
        if request.url.path.startswith("/p/"):
            page = render_error_page(GENERIC)
            return HTMLResponse(page.html, status_code=page.status_code)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_envelope("Terjadi kesalahan"),
        )


__all__ = ["error_envelope", "register_error_handlers"]
