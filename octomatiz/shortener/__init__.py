"""Short links: external providers with an internal short-code fallback."""

from octomatiz.shortener.providers import (
    PROVIDERS,
    ShortenerError,
    ShortenerProvider,
    providers_by_name,
)
from octomatiz.shortener.service import (
    create_internal_short_url,
    generate_short_code,
    resolve_short_code,
    short_key,
    shorten,
)

__all__ = [
    "PROVIDERS",
    "ShortenerError",
    "ShortenerProvider",
    "create_internal_short_url",
    "generate_short_code",
    "providers_by_name",
    "resolve_short_code",
    "short_key",
    "shorten",
]
