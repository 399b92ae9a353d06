"""Publication pipeline and page resolution.

Publishing validates the project, allocates a unique slug, stores the
page record through the storage gate and then tries to attach a short
link. Only the record write can fail a publish; short-link problems are
logged and the link is left out of the result.

Resolution reads the record back and turns every storage outcome into a
response: stored HTML on a hit, a branded error page otherwise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from octomatiz.config import Settings
from octomatiz.error_pages import render_error_page
from octomatiz.publish.schema import PageRecord, ProjectPayload
from octomatiz.shortener.providers import providers_by_name
from octomatiz.shortener.service import short_key, shorten
from octomatiz.slugs import (
    allocate_unique_slug,
    base_slug_for,
    domain_for,
    landing_key,
)
from octomatiz.storage.gate import StorageGate
from octomatiz.types import ErrorCode

logger = logging.getLogger(__name__)

# (attribute, wire name) of fields a project must have to be published
REQUIRED_FIELDS = (
    ("business_name", "businessName"),
    ("headline", "headline"),
    ("whatsapp", "whatsapp"),
)

# Used when a business name has no characters usable in a slug
FALLBACK_SLUG = "halaman"


class ProjectValidationError(Exception):
    """Raised when a project lacks fields required for publishing."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing required fields: {', '.join(missing)}")


@dataclass
class PublishOutcome:
    """Result of publishing a page."""

    success: bool
    slug: str | None = None
    url: str | None = None
    domain: str | None = None
    short_url: str | None = None
    error: str | None = None
    error_code: ErrorCode | None = None


@dataclass
class PageResponse:
    """HTTP-ready result of resolving a slug."""

    status_code: int
    html: str
    headers: dict[str, str] = field(default_factory=dict)
    record: dict[str, Any] | None = None

    @property
    def found(self) -> bool:
        return self.record is not None


def missing_project_fields(project: ProjectPayload) -> list[str]:
    """Return wire names of required fields that are empty."""
    return [
        wire_name
        for attr, wire_name in REQUIRED_FIELDS
        if not getattr(project, attr).strip()
    ]


def validate_project(project: ProjectPayload) -> None:
    """Check that a project can be published.

    Raises:
        ProjectValidationError: If required fields are missing.
    """
    missing = missing_project_fields(project)
    if missing:
        raise ProjectValidationError(missing)


def build_page_record(project: ProjectPayload, html: str) -> PageRecord:
    """Build the record stored for a published page."""
    return PageRecord(
        html=html,
        business_name=project.business_name,
        project_id=project.id,
        template=project.template,
        color_theme=project.color_theme,
    )


async def _attach_short_url(
    outcome: PublishOutcome,
    slug: str,
    url: str,
    gate: StorageGate,
    base_url: str,
    settings: Settings,
    http_client: httpx.AsyncClient | None,
) -> None:
    result = await shorten(
        url,
        base_url,
        slug,
        client=http_client,
        providers=providers_by_name(settings.shortener_providers),
        timeout=settings.shortener_timeout,
    )
    if not result.success:
        logger.warning("Short link skipped for %s: %s", slug, result.error)
        return

    if result.is_internal:
        stored = await gate.put(
            short_key(result.short_code),
            slug,
            expiration_ttl=settings.page_ttl_seconds,
        )
        if not stored.success:
            logger.warning(
                "Short code %s not stored for %s, omitting short link",
                result.short_code,
                slug,
            )
            return

    outcome.short_url = result.short_url


async def publish_page(
    project: ProjectPayload,
    html: str,
    gate: StorageGate,
    *,
    base_url: str,
    settings: Settings,
    http_client: httpx.AsyncClient | None = None,
) -> PublishOutcome:
    """Publish a rendered landing page.

    Args:
        project: Project being published.
        html: Rendered page HTML, stored verbatim.
        gate: Storage gate for slug probing and writes.
        base_url: Public base URL of the site.
        settings: Application settings.
        http_client: Client for external shortening providers.

    Returns:
        PublishOutcome; on failure ``error_code`` is ``KV_UNAVAILABLE`` or
        ``KV_WRITE_ERROR``.

    Raises:
        ProjectValidationError: If required project fields are missing.
    """
    validate_project(project)
    base_url = base_url.rstrip("/")

    record = build_page_record(project, html)
    base_slug = base_slug_for(project.business_name) or FALLBACK_SLUG
    slug = await allocate_unique_slug(base_slug, gate)

    stored = await gate.put(
        landing_key(slug), record.to_json(), expiration_ttl=settings.page_ttl_seconds
    )
    if not stored.success:
        logger.error("Publishing %s failed: %s", slug, stored.error_code)
        return PublishOutcome(
            success=False, error=stored.error, error_code=stored.error_code
        )

    url = f"{base_url}/p/{slug}"
    outcome = PublishOutcome(
        success=True,
        slug=slug,
        url=url,
        domain=domain_for(slug, settings.domain_suffix),
    )
    logger.info("Published %s for %r", slug, project.business_name)

    try:
        await _attach_short_url(
            outcome, slug, url, gate, base_url, settings, http_client
        )
    except Exception:
        logger.exception("Short link generation failed for %s", slug)

    return outcome


async def resolve_page(
    slug: str, gate: StorageGate, *, cache_max_age: int = 3600
) -> PageResponse:
    """Resolve a slug to the response serving its page.

    Args:
        slug: Page slug from the URL.
        gate: Storage gate.
        cache_max_age: Cache-Control max-age for a served page.

    Returns:
        PageResponse with stored HTML (200) or a branded error page.
    """
    result = await gate.get(landing_key(slug), as_json=True)
    if not result.ok:
        page = render_error_page(result.error.error_code, slug)
        return PageResponse(status_code=page.status_code, html=page.html)

    data = result.data
    html = data.get("html") if isinstance(data, dict) else None
    if not html or not isinstance(html, str):
        page = render_error_page(ErrorCode.NOT_FOUND, slug)
        return PageResponse(status_code=page.status_code, html=page.html)

    return PageResponse(
        status_code=200,
        html=html,
        headers={"Cache-Control": f"public, max-age={cache_max_age}"},
        record=data,
    )


__all__ = [
    "FALLBACK_SLUG",
    "PageResponse",
    "ProjectValidationError",
    "PublishOutcome",
    "build_page_record",
    "missing_project_fields",
    "publish_page",
    "resolve_page",
    "validate_project",
]
