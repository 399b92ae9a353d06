"""Fire-and-forget click recording and click summaries.

The resolution endpoint hands ``ClickRecorder.record`` to a background
task after the page response is built. ``record`` never raises: every
failure is logged here and goes no further.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from octomatiz.analytics.models import ClickEvent
from octomatiz.storage.gate import StorageGate

logger = logging.getLogger(__name__)

VIEWS_PREFIX = "views:"


def views_key(slug: str) -> str:
    """Return the store key of a slug's view counter."""
    return f"{VIEWS_PREFIX}{slug}"


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


@dataclass
class LinkClick:
    """A single page view to record."""

    slug: str
    referrer: str | None = None
    user_agent: str | None = None
    project_id: str | None = None
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass
class DailyClicks:
    """Click count for one day."""

    date: str
    count: int


@dataclass
class SlugAnalytics:
    """Click summary for a slug."""

    slug: str
    views: int
    total_clicks: int
    clicks_by_day: list[DailyClicks]

    def to_dict(self) -> dict[str, object]:
        """Convert to the camelCase JSON shape used by the API."""
        return {
            "slug": self.slug,
            "views": self.views,
            "totalClicks": self.total_clicks,
            "clicksByDay": [
                {"date": day.date, "count": day.count} for day in self.clicks_by_day
            ],
        }


def _parse_count(raw: object) -> int:
    try:
        return int(str(raw))
    except (TypeError, ValueError):
        return 0


async def get_view_count(gate: StorageGate, slug: str) -> int:
    """Return the view counter of a slug (0 if missing or unreadable)."""
    result = await gate.get(views_key(slug))
    if not result.ok or result.data is None:
        return 0
    return _parse_count(result.data)


class ClickRecorder:
    """Record page views in the view counter and the click event table.

    Args:
        gate: Storage gate holding ``views:<slug>`` counters.
        session_factory: Session factory for click events; events are not
            stored without one.
    """

    def __init__(
        self,
        gate: StorageGate,
        session_factory: sessionmaker[Session] | None = None,
    ) -> None:
        self.gate = gate
        self.session_factory = session_factory

    async def record(self, click: LinkClick) -> None:
        """Record a click. Never raises."""
        try:
            await self._record(click)
        except Exception:
            logger.exception("Analytics recording failed for %s", click.slug)

    async def _record(self, click: LinkClick) -> None:
        if self.session_factory is not None:
            try:
                await asyncio.to_thread(self._insert_event, self.session_factory, click)
            except Exception:
                logger.exception("Click event insert failed for %s", click.slug)

        if self.gate.available():
            await self._increment_views(click.slug)

    def _insert_event(
        self, session_factory: sessionmaker[Session], click: LinkClick
    ) -> None:
        with session_factory() as session:
            session.add(
                ClickEvent(
                    slug=click.slug,
                    project_id=click.project_id,
                    referrer=click.referrer,
                    user_agent=click.user_agent,
                    created_at=click.timestamp,
                )
            )
            session.commit()

    async def _increment_views(self, slug: str) -> int:
        # Read-modify-write; concurrent views may lose increments
        current = await get_view_count(self.gate, slug)
        new_count = current + 1
        result = await self.gate.put(views_key(slug), str(new_count))
        if not result.success:
            logger.error("Failed to increment view counter for %s", slug)
            return current
        return new_count


def _clicks_by_day(session: Session, slug: str, since: datetime) -> list[DailyClicks]:
    day = func.date(ClickEvent.created_at)
    rows = session.execute(
        select(day.label("date"), func.count().label("count"))
        .where(ClickEvent.slug == slug, ClickEvent.created_at >= since)
        .group_by(day)
        .order_by(day.desc())
    ).all()
    return [DailyClicks(date=str(row.date), count=row.count) for row in rows]


def get_slug_analytics(
    session: Session, slug: str, views: int = 0, days: int = 30
) -> SlugAnalytics:
    """Summarize clicks for a slug.

    Args:
        session: Database session.
        slug: Page slug.
        views: View counter value to include in the summary.
        days: Window for the per-day breakdown.

    Returns:
        SlugAnalytics with total clicks and per-day counts, newest first.
    """
    total = session.scalar(
        select(func.count()).select_from(ClickEvent).where(ClickEvent.slug == slug)
    )
    since = _utcnow() - timedelta(days=days)
    return SlugAnalytics(
        slug=slug,
        views=views,
        total_clicks=total or 0,
        clicks_by_day=_clicks_by_day(session, slug, since),
    )


def get_all_analytics(session: Session, days: int = 30) -> list[SlugAnalytics]:
    """Summarize clicks for every page that has been clicked.

    Totals cover all recorded clicks; the per-day breakdown covers the
    last ``days`` days. View counters live in the key-value store and are
    left at 0 here.

    Args:
        session: Database session.
        days: Window for the per-day breakdowns.

    Returns:
        One SlugAnalytics per slug, most clicked first.
    """
    total = func.count().label("total")
    rows = session.execute(
        select(ClickEvent.slug, total)
        .group_by(ClickEvent.slug)
        .order_by(total.desc(), ClickEvent.slug)
    ).all()

    since = _utcnow() - timedelta(days=days)
    return [
        SlugAnalytics(
            slug=row.slug,
            views=0,
            total_clicks=row.total,
            clicks_by_day=_clicks_by_day(session, row.slug, since),
        )
        for row in rows
    ]


__all__ = [
    "ClickRecorder",
    "DailyClicks",
    "LinkClick",
    "SlugAnalytics",
    "get_all_analytics",
    "get_slug_analytics",
    "get_view_count",
    "views_key",
]
