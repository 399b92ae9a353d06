"""Shared type definitions for octomatiz.

This module contains enums and result dataclasses shared across
subpackages to avoid circular imports.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Storage error taxonomy surfaced to HTTP callers."""

    KV_UNAVAILABLE = "KV_UNAVAILABLE"
    KV_READ_ERROR = "KV_READ_ERROR"
    KV_WRITE_ERROR = "KV_WRITE_ERROR"
    NOT_FOUND = "NOT_FOUND"


@dataclass
class KVResult:
    """Outcome of a storage operation.

    Failures carry a human-readable message and an error code; a
    successful result carries neither.
    """

    success: bool
    error: str | None = None
    error_code: ErrorCode | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase JSON envelope used by the API."""
        result: dict[str, Any] = {"success": self.success}
        if self.error is not None:
            result["error"] = self.error
        if self.error_code is not None:
            result["errorCode"] = self.error_code.value
        return result


@dataclass
class KVGetResult:
    """Outcome of a storage read.

    ``data`` is None both when the key is absent and when the read failed;
    only a failure sets ``error``.
    """

    data: Any = None
    error: KVResult | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ShortUrlResult:
    """Outcome of a short link request."""

    success: bool
    short_url: str | None = None
    provider: str | None = None
    short_code: str | None = None
    error: str | None = None

    @property
    def is_internal(self) -> bool:
        """Whether the short code must be persisted by the caller."""
        return self.short_code is not None


__all__ = [
    "ErrorCode",
    "KVGetResult",
    "KVResult",
    "ShortUrlResult",
]
