"""Short link creation and resolution.

``shorten`` walks the external providers in priority order and falls
back to an internal short code. Internal codes are returned unpersisted:
the caller stores ``short:<code> -> slug`` through the storage gate.
Nothing here raises; failures come back as ``ShortUrlResult`` data.
"""

from __future__ import annotations

import logging
import re
import secrets

import httpx

from octomatiz.shortener.providers import (
    DEFAULT_TIMEOUT,
    ShortenerError,
    ShortenerProvider,
    request_short_url,
)
from octomatiz.storage.gate import StorageGate
from octomatiz.types import KVGetResult, ShortUrlResult

logger = logging.getLogger(__name__)

SHORT_PREFIX = "short:"
INTERNAL_PROVIDER = "internal"

SHORT_CODE_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"
SHORT_CODE_LENGTH = 6

_SHORT_CODE_PATTERN = re.compile(r"^[a-z0-9]{1,32}$")


def short_key(code: str) -> str:
    """Return the store key of a short code mapping."""
    return f"{SHORT_PREFIX}{code}"


def is_valid_short_code(code: str) -> bool:
    """Return True if ``code`` looks like an internal short code."""
    return bool(_SHORT_CODE_PATTERN.match(code))


def generate_short_code(length: int = SHORT_CODE_LENGTH) -> str:
    """Generate a random lowercase alphanumeric short code."""
    return "".join(secrets.choice(SHORT_CODE_ALPHABET) for _ in range(length))


def create_internal_short_url(base_url: str, slug: str) -> ShortUrlResult:
    """Create an internal ``/s/<code>`` short URL for a slug.

    The mapping is not stored; persist ``short_key(code) -> slug`` to make
    the link resolvable.
    """
    code = generate_short_code()
    logger.debug("Generated internal short code %s for %s", code, slug)
    return ShortUrlResult(
        success=True,
        short_url=f"{base_url.rstrip('/')}/s/{code}",
        provider=INTERNAL_PROVIDER,
        short_code=code,
    )


async def shorten(
    long_url: str,
    base_url: str,
    slug: str,
    *,
    client: httpx.AsyncClient | None = None,
    providers: list[ShortenerProvider] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> ShortUrlResult:
    """Shorten a published page URL.

    Args:
        long_url: Public URL of the page.
        base_url: Site base URL for internal short links.
        slug: Page slug the internal short code maps to.
        client: HTTPX async client; external providers are skipped without one.
        providers: External providers in priority order.
        timeout: Timeout per provider attempt in seconds.

    Returns:
        ShortUrlResult. ``short_code`` is set only for internal links.
    """
    if client is not None:
        for provider in providers or []:
            try:
                short_url = await request_short_url(
                    client, provider, long_url, timeout=timeout
                )
            except ShortenerError as e:
                logger.warning("Shortener %s failed (%s): %s", provider.name, e.code, e)
                continue
            logger.info("Shortened %s via %s", long_url, provider.name)
            return ShortUrlResult(
                success=True, short_url=short_url, provider=provider.name
            )

    return create_internal_short_url(base_url, slug)


async def lookup_short_code(code: str, gate: StorageGate) -> KVGetResult:
    """Read the mapping of a short code through the gate.

    Returns:
        KVGetResult; ``data`` is the slug or None.
    """
    return await gate.get(short_key(code))


async def resolve_short_code(code: str, gate: StorageGate) -> str | None:
    """Resolve a short code to its slug.

    Absent codes, malformed codes and storage failures all resolve to
    None: a broken short link degrades to "not found".
    """
    if not is_valid_short_code(code):
        return None
    result = await lookup_short_code(code, gate)
    if not result.ok:
        logger.warning(
            "Short code %s unresolved: %s", code, result.error.error_code.value
        )
        return None
    return result.data or None


__all__ = [
    "INTERNAL_PROVIDER",
    "SHORT_CODE_ALPHABET",
    "SHORT_CODE_LENGTH",
    "SHORT_PREFIX",
    "create_internal_short_url",
    "generate_short_code",
    "is_valid_short_code",
    "lookup_short_code",
    "resolve_short_code",
    "short_key",
    "shorten",
]
