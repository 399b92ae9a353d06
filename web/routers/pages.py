"""Published page endpoint.

- GET /p/{slug} - Serve a published landing page

Hits return the stored HTML with a cache directive and schedule click
recording as a background task that runs after the response is sent.
Misses and storage failures return the branded error page.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import HTMLResponse

from octomatiz.analytics import ClickRecorder, LinkClick
from octomatiz.config import Settings
from octomatiz.publish import resolve_page
from octomatiz.storage import StorageGate
from web.deps import get_app_settings, get_click_recorder, get_gate

router = APIRouter()


@router.get("/{slug}", response_class=HTMLResponse)
async def serve_page(
    slug: str,
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_app_settings),
    gate: StorageGate = Depends(get_gate),
    recorder: ClickRecorder = Depends(get_click_recorder),
) -> HTMLResponse:
    """Serve the page published under ``slug``."""
    page = await resolve_page(slug, gate, cache_max_age=settings.page_cache_max_age)

    if page.found:
        project_id = page.record.get("projectId")
        background_tasks.add_task(
            recorder.record,
            LinkClick(
                slug=slug,
                referrer=request.headers.get("referer"),
                user_agent=request.headers.get("user-agent"),
                project_id=project_id if isinstance(project_id, str) else None,
            ),
        )

    return HTMLResponse(page.html, status_code=page.status_code, headers=page.headers)
