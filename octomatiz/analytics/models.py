"""Click event ORM model.

One row per resolved page view, written by the click recorder.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from octomatiz.db import Base


class ClickEvent(Base):
    """ORM model for a landing-page click.

    Attributes:
        id: Primary key.
        slug: Slug of the page that was served.
        project_id: Project the page was published from, if known.
        referrer: Referer header of the request.
        user_agent: User-Agent header of the request.
        created_at: Time of the click.
    """

    __tablename__ = "click_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    slug: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    project_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    referrer: Mapped[str | None] = mapped_column(Text, nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    __table_args__ = (Index("ix_click_events_slug_created", "slug", "created_at"),)

    def __repr__(self) -> str:
        """Return string representation of ClickEvent."""
        return f"<ClickEvent(id={self.id}, slug='{self.slug}')>"


__all__ = ["ClickEvent"]
