"""Slug derivation and collision-free allocation.

A slug is the URL-safe name of a published page (``/p/<slug>``).
Uniqueness is checked against the ``landing:`` namespace at allocation
time only: probe-then-write is not transactional, so two concurrent
publishes of the same name may both pick the same candidate and the later
write wins.
"""

import logging
import re

from octomatiz.storage.gate import StorageGate

logger = logging.getLogger(__name__)

MAX_SLUG_LENGTH = 50
MAX_PROBES = 100

LANDING_PREFIX = "landing:"

_DISALLOWED_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE_RUN = re.compile(r"\s+")
_HYPHEN_RUN = re.compile(r"-+")


def landing_key(slug: str) -> str:
    """Return the store key of a page record."""
    return f"{LANDING_PREFIX}{slug}"


def base_slug_for(name: str) -> str:
    """Derive the base slug for a business name.

    Lowercases, drops characters outside ``[a-z0-9]``, whitespace and
    hyphens, turns whitespace runs into single hyphens, collapses repeated
    hyphens, truncates to 50 characters and trims hyphens at both ends.

    Examples:
        >>> base_slug_for("Toko Budi!")
        'toko-budi'
        >>> base_slug_for("")
        ''
    """
    slug = _DISALLOWED_CHARS.sub("", name.lower())
    slug = _WHITESPACE_RUN.sub("-", slug)
    slug = _HYPHEN_RUN.sub("-", slug)
    return slug[:MAX_SLUG_LENGTH].strip("-")


def domain_for(slug: str, suffix: str) -> str:
    """Return the display domain of a published page."""
    return f"{slug}.{suffix}"


def _candidates(base_slug: str):
    yield base_slug
    for n in range(1, MAX_PROBES):
        suffix = f"-{n}"
        # Suffixed slugs stay within MAX_SLUG_LENGTH
        stem = base_slug[: MAX_SLUG_LENGTH - len(suffix)].rstrip("-")
        yield f"{stem}{suffix}"


async def allocate_unique_slug(base_slug: str, gate: StorageGate) -> str:
    """Find a slug not yet used by a published page.

    Probes ``landing:<candidate>`` for the base slug, then ``base-1``,
    ``base-2`` and so on. After ``MAX_PROBES`` probes the last candidate is
    returned even if taken. Without a store the base slug is returned
    unchanged; a failed probe ends the search on that candidate.

    Args:
        base_slug: Slug derived from the business name.
        gate: Storage gate used for probing.

    Returns:
        Allocated slug.
    """
    if not gate.available():
        return base_slug

    candidate = base_slug
    for candidate in _candidates(base_slug):
        result = await gate.get(landing_key(candidate))
        if not result.ok:
            logger.warning(
                "Slug probe failed for %s, continuing with this candidate", candidate
            )
            return candidate
        if result.data is None:
            return candidate

    logger.warning(
        "No free slug for %s after %d probes, reusing %s",
        base_slug,
        MAX_PROBES,
        candidate,
    )
    return candidate


__all__ = [
    "LANDING_PREFIX",
    "MAX_PROBES",
    "MAX_SLUG_LENGTH",
    "allocate_unique_slug",
    "base_slug_for",
    "domain_for",
    "landing_key",
]
