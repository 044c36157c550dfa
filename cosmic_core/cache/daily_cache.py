"""Day-scoped cache of AI responses.

The same request on the same day returns the stored answer instead of calling
the model again. Everything is kept under one key and discarded when the
calendar day changes.
"""

from collections.abc import Callable
from datetime import date
from typing import Any, Optional, Union

from cosmic_core.exceptions import StoreError
from cosmic_core.store.durable_store import DurableStore
from cosmic_core.utils.fingerprint import FormInput, build_cache_key
from cosmic_core.utils.logger import get_logger

log = get_logger(__name__)


class DailyResponseCache:
    def __init__(
        self,
        store: DurableStore,
        key: str = "cosmicjyoti_ai_cache",
        max_entries: int = 50,
        keep: int = 40,
        today: Callable[[], date] = date.today,
    ):
        self.store = store
        self.key = key
        self.max_entries = max_entries
        self.keep = keep
        self._today = today

    async def _load(self) -> dict[str, Any]:
        today = self._today().isoformat()
        raw = await self.store.get_json(self.key)
        if not isinstance(raw, dict) or raw.get("date") != today:
            return {}
        entries = raw.get("entries")
        return entries if isinstance(entries, dict) else {}

    async def get(self, feature: str, request: Union[str, FormInput]) -> Optional[Any]:
        entries = await self._load()
        return entries.get(build_cache_key(feature, request))

    async def set(self, feature: str, request: Union[str, FormInput], value: Any) -> None:
        entries = await self._load()
        cache_key = build_cache_key(feature, request)
        entries.pop(cache_key, None)
        if len(entries) >= self.max_entries:
            # Oldest entries win; the newest write is always added after the trim
            entries = dict(list(entries.items())[: self.keep])
        entries[cache_key] = value

        try:
            await self.store.set_json(
                self.key, {"date": self._today().isoformat(), "entries": entries}
            )
        except StoreError as e:
            log.warning("ai cache save failed", feature=feature, error=e.message)
