"""Configuration endpoints."""

from typing import Any

from fastapi import APIRouter, Depends

from octomatiz.config import Settings
from web.deps import get_app_settings

router = APIRouter()


@router.get("")
def get_config(settings: Settings = Depends(get_app_settings)) -> dict[str, Any]:
    """Get effective configuration.

    Returns:
        Current configuration as JSON.
    """
    return {
        "db_url": settings.db_url,
        "kv_enabled": settings.kv_enabled,
        "page_ttl_seconds": settings.page_ttl_seconds,
        "public_base_url": settings.public_base_url,
        "domain_suffix": settings.domain_suffix,
        "page_cache_max_age": settings.page_cache_max_age,
        "shortener_providers": settings.shortener_providers,
        "shortener_timeout": settings.shortener_timeout,
        "deploy_rate_limit": settings.deploy_rate_limit,
        "deploy_rate_window_ms": settings.deploy_rate_window_ms,
        "log_level": settings.log_level,
    }
