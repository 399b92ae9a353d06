"""Short link redirect endpoint.

- GET /s/{code} - Redirect a short code to its published page

302 to ``/p/{slug}`` on a hit, 404 for unknown codes, 302 to ``/`` when
storage is not configured and 500 when the lookup fails.
"""

from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi import status as http_status
from fastapi.responses import PlainTextResponse, RedirectResponse, Response

from octomatiz.shortener.service import is_valid_short_code, lookup_short_code
from octomatiz.storage import StorageGate
from web.deps import get_gate

router = APIRouter()


@router.get("/{code}")
async def redirect_short_code(
    code: str,
    gate: StorageGate = Depends(get_gate),
) -> Response:
    """Redirect a short code to the page it maps to."""
    if not gate.available():
        return RedirectResponse("/", status_code=http_status.HTTP_302_FOUND)

    not_found = PlainTextResponse(
        "Link tidak ditemukan", status_code=http_status.HTTP_404_NOT_FOUND
    )
    if not is_valid_short_code(code):
        return not_found

    result = await lookup_short_code(code, gate)
    if not result.ok:
        return PlainTextResponse(
            "Terjadi kesalahan",
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    if not result.data:
        return not_found

    return RedirectResponse(
        f"/p/{quote(result.data)}", status_code=http_status.HTTP_302_FOUND
    )
