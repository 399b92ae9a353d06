"""Storage gate: fault-tolerant access to the key-value store.

The gate never raises. Every store fault is converted into a ``KVResult``
carrying one of the ``ErrorCode`` values:

- no store attached: ``KV_UNAVAILABLE`` (store is not touched)
- read fault: ``KV_READ_ERROR`` (no retry)
- write fault surviving one immediate retry: ``KV_WRITE_ERROR``

Absent keys are not errors; ``get`` returns ``data=None`` without an error.
"""

from __future__ import annotations

import json
import logging

from octomatiz.storage.store import KeyValueStore
from octomatiz.types import ErrorCode, KVGetResult, KVResult

logger = logging.getLogger(__name__)

# User-facing messages, shown in the deploy API envelope
UNAVAILABLE_MESSAGE = "KV storage tidak tersedia"
READ_ERROR_MESSAGE = "Gagal membaca data dari storage"
WRITE_ERROR_MESSAGE = "Gagal menyimpan data ke storage"

# Physical write attempts per put (first try plus one retry)
MAX_WRITE_ATTEMPTS = 2


def unavailable_result() -> KVResult:
    """Build the result returned when no store is attached."""
    return KVResult(
        success=False,
        error=UNAVAILABLE_MESSAGE,
        error_code=ErrorCode.KV_UNAVAILABLE,
    )


class StorageGate:
    """Wrap an optional key-value store with error classification and retry.

    Args:
        store: Store to wrap, or None when storage is not configured.
    """

    def __init__(self, store: KeyValueStore | None) -> None:
        self._store = store

    def available(self) -> bool:
        """Return True when a store is attached."""
        return self._store is not None

    async def get(self, key: str, *, as_json: bool = False) -> KVGetResult:
        """Read a key.

        Args:
            key: Key to read.
            as_json: Decode the stored text as JSON.

        Returns:
            KVGetResult with the value (None if absent) or an error.
        """
        if self._store is None:
            return KVGetResult(data=None, error=unavailable_result())

        try:
            raw = await self._store.get(key)
            if raw is None or not as_json:
                return KVGetResult(data=raw)
            return KVGetResult(data=json.loads(raw))
        except Exception as e:
            logger.error("KV read error for key %s: %s", key, e)
            return KVGetResult(
                data=None,
                error=KVResult(
                    success=False,
                    error=READ_ERROR_MESSAGE,
                    error_code=ErrorCode.KV_READ_ERROR,
                ),
            )

    async def put(
        self, key: str, value: str, expiration_ttl: int | None = None
    ) -> KVResult:
        """Write a key, retrying once immediately on failure.

        Args:
            key: Key to write.
            value: Text value to store.
            expiration_ttl: Optional expiry in seconds, passed to the store.

        Returns:
            KVResult with success, or ``KV_UNAVAILABLE``/``KV_WRITE_ERROR``.
        """
        if self._store is None:
            return unavailable_result()

        try:
            await self._store.put(key, value, expiration_ttl=expiration_ttl)
            return KVResult(success=True)
        except Exception as first_error:
            logger.warning(
                "KV write failed (attempt 1) for key %s: %s", key, first_error
            )

        # Single immediate retry with identical arguments
        try:
            await self._store.put(key, value, expiration_ttl=expiration_ttl)
        except Exception as retry_error:
            logger.error(
                "KV write failed (attempt %d) for key %s: %s",
                MAX_WRITE_ATTEMPTS,
                key,
                retry_error,
            )
            return KVResult(
                success=False,
                error=WRITE_ERROR_MESSAGE,
                error_code=ErrorCode.KV_WRITE_ERROR,
            )
        logger.info("KV write succeeded on retry for key %s", key)
        return KVResult(success=True)


__all__ = [
    "MAX_WRITE_ATTEMPTS",
    "StorageGate",
    "unavailable_result",
]
