"""Device key-value store adapter and backends."""

from cosmic_core.store.backends import FileBackend, MemoryBackend, RedisBackend, StoreBackend
from cosmic_core.store.durable_store import DurableStore, is_quota_error

__all__ = [
    "DurableStore",
    "FileBackend",
    "MemoryBackend",
    "RedisBackend",
    "StoreBackend",
    "is_quota_error",
]
