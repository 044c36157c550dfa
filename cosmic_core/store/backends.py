"""Raw key-value backends standing in for the device's persistent string store.

Backends speak plain strings and raise their native errors. Translating those
errors into the library's taxonomy is the job of ``DurableStore``.
"""

import errno
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from redis.asyncio import Redis


class StoreBackend(ABC):
    """Abstract persistent string store."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when absent."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete a key. Missing keys are ignored."""

    @abstractmethod
    async def keys(self, prefix: str = "") -> list[str]:
        """List keys starting with ``prefix``."""


def _entry_size(key: str, value: str) -> int:
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))


def _quota_error(key: str) -> OSError:
    return OSError(errno.ENOSPC, "Storage quota exceeded", key)


class MemoryBackend(StoreBackend):
    """Dict-backed store with an optional total capacity.

    Writes that would push the total size of keys and values past
    ``capacity_bytes`` fail with ``OSError(ENOSPC)``, the way a full
    device store does.
    """

    def __init__(self, capacity_bytes: Optional[int] = None):
        self.capacity_bytes = capacity_bytes
        self._data: dict[str, str] = {}

    @property
    def used_bytes(self) -> int:
        return sum(_entry_size(k, v) for k, v in self._data.items())

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        if self.capacity_bytes is not None:
            current = self._data.get(key)
            freed = _entry_size(key, current) if current is not None else 0
            if self.used_bytes - freed + _entry_size(key, value) > self.capacity_bytes:
                raise _quota_error(key)
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    async def keys(self, prefix: str = "") -> list[str]:
        return [k for k in self._data if k.startswith(prefix)]


class FileBackend(StoreBackend):
    """One file per key under ``root``.

    File names are the hex-encoded key so any key is a valid name. Writes go
    through a temp file and ``os.replace`` so a crash never leaves half a value.
    """

    SUFFIX = ".val"

    def __init__(self, root: str | Path, capacity_bytes: Optional[int] = None):
        self.root = Path(root)
        self.capacity_bytes = capacity_bytes
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.root / (key.encode("utf-8").hex() + self.SUFFIX)

    def _key(self, path: Path) -> str:
        return bytes.fromhex(path.name[: -len(self.SUFFIX)]).decode("utf-8")

    def _used_bytes(self, exclude: Optional[Path] = None) -> int:
        total = 0
        for path in self.root.glob("*" + self.SUFFIX):
            if path != exclude:
                total += path.stat().st_size + len(path.stem) // 2
        return total

    async def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    async def set(self, key: str, value: str) -> None:
        path = self._path(key)
        if self.capacity_bytes is not None:
            if self._used_bytes(exclude=path) + _entry_size(key, value) > self.capacity_bytes:
                raise _quota_error(key)

        fd, tmp = tempfile.mkstemp(dir=self.root, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    async def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    async def keys(self, prefix: str = "") -> list[str]:
        found = [self._key(p) for p in self.root.glob("*" + self.SUFFIX)]
        return [k for k in found if k.startswith(prefix)]


class RedisBackend(StoreBackend):
    """Redis-backed store. Capacity is whatever ``maxmemory`` allows.

    The client must be created with ``decode_responses=True``.
    """

    def __init__(self, redis: Redis, namespace: str = ""):
        self.redis = redis
        self.namespace = namespace

    def _k(self, key: str) -> str:
        return self.namespace + key

    async def get(self, key: str) -> Optional[str]:
        return await self.redis.get(self._k(key))

    async def set(self, key: str, value: str) -> None:
        await self.redis.set(self._k(key), value)

    async def remove(self, key: str) -> None:
        await self.redis.delete(self._k(key))

    async def keys(self, prefix: str = "") -> list[str]:
        found = []
        async for raw in self.redis.scan_iter(match=self._k(prefix) + "*"):
            found.append(raw[len(self.namespace) :])
        return found
