"""Key-value storage: SQL-backed store and the fault-tolerant storage gate."""

from octomatiz.storage.gate import MAX_WRITE_ATTEMPTS, StorageGate
from octomatiz.storage.store import KeyValueStore, SqlKeyValueStore

__all__ = [
    "MAX_WRITE_ATTEMPTS",
    "KeyValueStore",
    "SqlKeyValueStore",
    "StorageGate",
]
