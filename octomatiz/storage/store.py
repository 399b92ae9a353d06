"""Key-value store backends.

The storage gate talks to any object satisfying ``KeyValueStore``. The
SQL backend keeps entries in the ``kv_entries`` table and runs blocking
session work in a worker thread so callers can await it.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from typing import Protocol, runtime_checkable

from sqlalchemy.orm import Session, sessionmaker

from octomatiz.storage.models import KVEntry

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """Key-value interface consumed by the storage gate.

    Both operations may raise; there are no transactions and no
    compare-and-swap.
    """

    async def get(self, key: str) -> str | None: ...

    async def put(
        self, key: str, value: str, expiration_ttl: int | None = None
    ) -> None: ...


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class SqlKeyValueStore:
    """Key-value store backed by a SQLAlchemy session factory."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._get_sync, key)

    async def put(
        self, key: str, value: str, expiration_ttl: int | None = None
    ) -> None:
        await asyncio.to_thread(self._put_sync, key, value, expiration_ttl)

    def _get_sync(self, key: str) -> str | None:
        with self._session_factory() as session:
            entry = session.get(KVEntry, key)
            if entry is None:
                return None
            if entry.expires_at is not None and entry.expires_at <= _utcnow():
                logger.debug("Key %s expired at %s", key, entry.expires_at)
                return None
            return entry.value

    def _put_sync(self, key: str, value: str, expiration_ttl: int | None) -> None:
        expires_at = None
        if expiration_ttl is not None:
            expires_at = _utcnow() + timedelta(seconds=expiration_ttl)

        with self._session_factory() as session:
            entry = session.get(KVEntry, key)
            if entry is None:
                session.add(KVEntry(key=key, value=value, expires_at=expires_at))
            else:
                entry.value = value
                entry.expires_at = expires_at
            session.commit()


__all__ = ["KeyValueStore", "SqlKeyValueStore"]
