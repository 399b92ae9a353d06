"""Deploy endpoint.

- POST /api/deploy - Publish a rendered landing page

Request body: ``{"project": {...}, "html": "<!DOCTYPE html>..."}``.
Responses use a JSON envelope; failures carry ``success: false`` and,
for storage failures, an ``errorCode``.
"""

import logging
from typing import Any

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi import status as http_status
from fastapi.responses import JSONResponse

from octomatiz.config import Settings
from octomatiz.error_pages import status_for_error
from octomatiz.publish import DeployRequest, ProjectValidationError, publish_page
from octomatiz.ratelimit import RateLimiter, client_ip
from octomatiz.storage import StorageGate
from web.deps import (
    get_app_settings,
    get_gate,
    get_http_client,
    get_rate_limiter,
    public_base_url,
)
from web.errors import error_envelope

logger = logging.getLogger(__name__)

router = APIRouter()


def _bad_request(message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(
        status_code=http_status.HTTP_400_BAD_REQUEST,
        content={**error_envelope(message), **extra},
    )


@router.post("/deploy", status_code=http_status.HTTP_201_CREATED)
async def deploy(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    gate: StorageGate = Depends(get_gate),
    http_client: httpx.AsyncClient | None = Depends(get_http_client),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> JSONResponse:
    """Publish a landing page.

    Returns:
        201 with ``{success, url, shortUrl?, domain, slug, html}``; 400 on a
        missing or incomplete body; 429 when rate limited; 503 when storage
        is unavailable; 500 when the write fails.
    """
    fallback_ip = request.client.host if request.client else None
    decision = limiter.check(
        f"deploy:{client_ip(request.headers, fallback_ip)}",
        settings.deploy_rate_limit,
        settings.deploy_rate_window_ms,
    )
    if not decision.allowed:
        return JSONResponse(
            status_code=http_status.HTTP_429_TOO_MANY_REQUESTS,
            content={
                **error_envelope("Terlalu banyak permintaan. Coba lagi nanti."),
                "retryAfter": decision.retry_after_seconds,
            },
            headers={"Retry-After": str(decision.retry_after_seconds)},
        )

    try:
        body = DeployRequest.model_validate(await request.json())
    except ValueError as e:
        logger.warning("Invalid deploy body: %s", e)
        return _bad_request("Format permintaan tidak valid")

    if body.project is None:
        return _bad_request("Project data tidak ditemukan")
    if not body.html:
        return _bad_request("HTML landing page tidak ditemukan")

    try:
        outcome = await publish_page(
            body.project,
            body.html,
            gate,
            base_url=public_base_url(request, settings),
            settings=settings,
            http_client=http_client,
        )
    except ProjectValidationError as e:
        return _bad_request("Data project tidak lengkap", missing=e.missing)
    except Exception:
        logger.exception("Deploy API error")
        return JSONResponse(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_envelope("Terjadi kesalahan saat deploy"),
        )

    if not outcome.success:
        code = outcome.error_code
        return JSONResponse(
            status_code=status_for_error(code),
            content=error_envelope(
                outcome.error or "Gagal menyimpan halaman",
                code.value if code is not None else None,
            ),
        )

    content: dict[str, Any] = {
        "success": True,
        "url": outcome.url,
        "domain": outcome.domain,
        "slug": outcome.slug,
        "html": body.html,
    }
    if outcome.short_url:
        content["shortUrl"] = outcome.short_url
    return JSONResponse(status_code=http_status.HTTP_201_CREATED, content=content)
