"""External URL shortening providers.

Each provider exposes a simple GET API that answers with the short URL as
plain text. A response is accepted only when it is 2xx and its body starts
with the provider's short-link prefix.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)

# Timeout per provider attempt (seconds)
DEFAULT_TIMEOUT = 5.0


class ShortenerError(Exception):
    """Raised when a provider does not return a usable short URL."""

    def __init__(self, message: str, code: str = "shortener_error") -> None:
        """Initialize ShortenerError.

        Args:
            message: Error description.
            code: Error code for structured error handling.
        """
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class ShortenerProvider:
    """An external shortening service."""

    name: str
    api_url: str
    expected_prefix: str


PROVIDERS: dict[str, ShortenerProvider] = {
    "is.gd": ShortenerProvider(
        name="is.gd",
        api_url="https://is.gd/create.php",
        expected_prefix="https://is.gd/",
    ),
    "v.gd": ShortenerProvider(
        name="v.gd",
        api_url="https://v.gd/create.php",
        expected_prefix="https://v.gd/",
    ),
}


def providers_by_name(names: list[str]) -> list[ShortenerProvider]:
    """Resolve configured provider names, preserving priority order.

    Unknown names are skipped with a warning.
    """
    providers = []
    for name in names:
        provider = PROVIDERS.get(name)
        if provider is None:
            logger.warning("Unknown shortener provider %s, skipping", name)
            continue
        providers.append(provider)
    return providers


async def request_short_url(
    client: httpx.AsyncClient,
    provider: ShortenerProvider,
    long_url: str,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Ask one provider for a short URL.

    Args:
        client: HTTPX async client.
        provider: Provider to call.
        long_url: URL to shorten.
        timeout: Request timeout in seconds.

    Returns:
        Short URL returned by the provider.

    Raises:
        ShortenerError: If the provider fails or answers with a malformed body.
    """
    logger.debug("Requesting short URL from %s for %s", provider.name, long_url)

    try:
        response = await client.get(
            provider.api_url,
            params={"format": "simple", "url": long_url},
            timeout=timeout,
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise ShortenerError(
            f"HTTP error from {provider.name}: {e.response.status_code}",
            code="http_error",
        ) from e
    except httpx.TimeoutException as e:
        raise ShortenerError(
            f"Timeout calling {provider.name}",
            code="timeout",
        ) from e
    except httpx.RequestError as e:
        raise ShortenerError(
            f"Network error calling {provider.name}: {e}",
            code="network_error",
        ) from e

    short_url = response.text.strip()
    if not short_url.startswith(provider.expected_prefix):
        raise ShortenerError(
            f"Unexpected response from {provider.name}: {short_url[:80]!r}",
            code="malformed_response",
        )
    return short_url


__all__ = [
    "DEFAULT_TIMEOUT",
    "PROVIDERS",
    "ShortenerError",
    "ShortenerProvider",
    "providers_by_name",
    "request_short_url",
]
