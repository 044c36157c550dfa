"""Time-boxed feature unlocks earned by watching ads.

Expiry is applied lazily whenever grants are read; nothing runs in the
background because the host process may not be alive when a grant lapses.
"""

import time
from collections.abc import Callable
from datetime import timedelta

from pydantic import ValidationError

from cosmic_core.exceptions import StoreError
from cosmic_core.schemas.usage import FeatureGrant
from cosmic_core.store.durable_store import DurableStore
from cosmic_core.utils.logger import get_logger

log = get_logger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class GrantStore:
    def __init__(
        self,
        store: DurableStore,
        duration: timedelta = timedelta(minutes=5),
        key: str = "cosmicjyoti_ad_unlocks",
        clock_ms: Callable[[], int] = _now_ms,
    ):
        self.store = store
        self.duration_ms = int(duration.total_seconds() * 1000)
        self.key = key
        self._clock_ms = clock_ms

    async def _load(self) -> tuple[list[FeatureGrant], int]:
        """Valid grants plus the number of entries actually stored."""
        raw = await self.store.get_json(self.key)
        if not isinstance(raw, list):
            return [], 0
        grants = []
        for entry in raw:
            try:
                grants.append(FeatureGrant.model_validate(entry))
            except ValidationError:
                log.warning("dropping malformed grant")
        return grants, len(raw)

    async def _save(self, grants: list[FeatureGrant]) -> None:
        await self.store.set_json(self.key, [g.model_dump() for g in grants])

    async def active_grants(self) -> list[FeatureGrant]:
        """Unexpired grants. Expired and malformed entries are pruned from the store."""
        grants, stored = await self._load()
        now = self._clock_ms()
        active = [g for g in grants if g.expires_at > now]
        if len(active) != stored:
            try:
                await self._save(active)
            except StoreError as e:
                log.warning("failed to prune grants", error=e.message)
            else:
                log.debug("grants pruned", removed=stored - len(active))
        return active

    async def is_unlocked(self, feature: str) -> bool:
        now = self._clock_ms()
        return any(g.feature == feature and g.expires_at > now for g in await self.active_grants())

    async def remaining_ms(self, feature: str) -> int:
        """Milliseconds left on the feature's grant, 0 if there is none."""
        for grant in await self.active_grants():
            if grant.feature == feature:
                return max(0, grant.expires_at - self._clock_ms())
        return 0

    async def unlock(self, feature: str) -> FeatureGrant:
        """Grant ``feature`` for the configured duration, replacing any current grant."""
        now = self._clock_ms()
        grant = FeatureGrant(feature=feature, unlocked_at=now, expires_at=now + self.duration_ms)
        grants = [g for g in await self.active_grants() if g.feature != feature]
        grants.append(grant)
        try:
            await self._save(grants)
        except StoreError as e:
            log.warning("failed to save feature unlock", feature=feature, error=e.message)
        else:
            log.info("feature unlocked", feature=feature, expires_at=grant.expires_at)
        return grant

    async def clear(self) -> None:
        try:
            await self.store.remove(self.key)
        except StoreError as e:
            log.warning("failed to clear grants", error=e.message)
