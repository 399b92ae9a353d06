"""Landing-page click analytics."""

from octomatiz.analytics.recorder import (
    ClickRecorder,
    LinkClick,
    SlugAnalytics,
    get_all_analytics,
    get_slug_analytics,
    get_view_count,
    views_key,
)

__all__ = [
    "ClickRecorder",
    "LinkClick",
    "SlugAnalytics",
    "get_all_analytics",
    "get_slug_analytics",
    "get_view_count",
    "views_key",
]
