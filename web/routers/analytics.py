"""Click analytics endpoints.

- GET /api/analytics - Click summaries for every clicked page
- GET /api/analytics/{slug} - View count and click summary for a page

Summaries are read with blocking SQLAlchemy queries, which run in a worker
thread so page serving is not held up.
"""

import asyncio
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from octomatiz.analytics import get_all_analytics, get_slug_analytics, get_view_count
from octomatiz.storage import StorageGate
from web.deps import get_db, get_gate

router = APIRouter()


@router.get("")
async def all_analytics(
    days: int = Query(30, ge=1, le=365, description="Days in the daily breakdown"),
    gate: StorageGate = Depends(get_gate),
    db: Session = Depends(get_db),
) -> list[dict[str, Any]]:
    """Get clicks for all published pages.

    Args:
        days: Window for the per-day breakdowns.
        gate: Storage gate holding the view counters.
        db: Database session.

    Returns:
        List of ``{slug, views, totalClicks, clicksByDay}``, most clicked first.
    """
    summaries = await asyncio.to_thread(get_all_analytics, db, days)
    for summary in summaries:
        summary.views = await get_view_count(gate, summary.slug)
    return [summary.to_dict() for summary in summaries]


@router.get("/{slug}")
async def slug_analytics(
    slug: str,
    days: int = Query(30, ge=1, le=365, description="Days in the daily breakdown"),
    gate: StorageGate = Depends(get_gate),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Get clicks for a published page.

    Args:
        slug: Page slug.
        days: Window for the per-day breakdown.
        gate: Storage gate holding the view counter.
        db: Database session.

    Returns:
        ``{slug, views, totalClicks, clicksByDay}``.
    """
    views = await get_view_count(gate, slug)
    summary = await asyncio.to_thread(
        get_slug_analytics, db, slug, views=views, days=days
    )
    return summary.to_dict()
