"""Adapter over a raw backend that normalizes failures.

Quota conditions become ``StoreQuotaExceededError``; other write failures
become ``StoreError``. Reads never raise: unreadable or corrupt values are
logged and reported as absent.
"""

import errno
import json
from typing import Any, Optional

from redis.exceptions import RedisError, ResponseError

from cosmic_core.exceptions import StoreError, StoreQuotaExceededError
from cosmic_core.store.backends import StoreBackend
from cosmic_core.utils.logger import get_logger, truncate

log = get_logger(__name__)

_QUOTA_ERRNOS = frozenset({errno.ENOSPC, errno.EDQUOT})


def is_quota_error(exc: BaseException) -> bool:
    """Return True if a backend exception means the store is full."""
    if isinstance(exc, OSError) and exc.errno in _QUOTA_ERRNOS:
        return True
    if isinstance(exc, ResponseError) and str(exc).startswith("OOM"):
        return True
    return False


class DurableStore:
    """Persistent string store shared by the cache, quota and grant components.

    Each component owns a disjoint key namespace; the store itself knows
    nothing about them.
    """

    def __init__(self, backend: StoreBackend):
        self.backend = backend

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self.backend.get(key)
        except (OSError, RedisError, UnicodeDecodeError) as e:
            log.warning("store read failed", key=key, error=str(e))
            return None

    async def set(self, key: str, value: str) -> None:
        try:
            await self.backend.set(key, value)
        except (OSError, RedisError) as e:
            if is_quota_error(e):
                log.info("store quota exceeded", key=key, size=len(value))
                raise StoreQuotaExceededError(key=key, size=len(value)) from e
            log.warning("store write failed", key=key, error=str(e))
            raise StoreError(key=key, message=f"Failed to write '{key}': {e}") from e

    async def remove(self, key: str) -> None:
        try:
            await self.backend.remove(key)
        except (OSError, RedisError) as e:
            log.warning("store remove failed", key=key, error=str(e))
            raise StoreError(key=key, message=f"Failed to remove '{key}': {e}") from e

    async def keys(self, prefix: str = "") -> list[str]:
        try:
            return await self.backend.keys(prefix)
        except (OSError, RedisError) as e:
            log.warning("store key scan failed", prefix=prefix, error=str(e))
            return []

    async def get_json(self, key: str) -> Optional[Any]:
        """Load and decode a JSON value. Corrupt data reads as absent."""
        raw = await self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            log.warning("corrupt json in store", key=key, error=str(e), raw=truncate(str(raw), 100))
            return None

    async def set_json(self, key: str, value: Any) -> None:
        """Encode and store a JSON value."""
        await self.set(key, json.dumps(value, separators=(",", ":"), ensure_ascii=False))
