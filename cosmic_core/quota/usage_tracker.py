"""Daily usage counters for rate-limited actions."""

from collections.abc import Callable
from datetime import date
from typing import Optional

from pydantic import ValidationError

from cosmic_core.exceptions import StoreError
from cosmic_core.schemas.usage import UsageCounter
from cosmic_core.store.durable_store import DurableStore
from cosmic_core.utils.logger import get_logger

log = get_logger(__name__)

UNLIMITED = -1


class UsageQuotaTracker:
    """Counts one action per calendar day, with bonus allowance from ads.

    The stored counter resets the first time it is touched on a new
    device-local day. A read that only observes the reset does not write it
    back. Tracking is advisory: storage failures are logged and ignored, and
    no method raises.
    """

    def __init__(
        self,
        store: DurableStore,
        base_limit: int = 10,
        action: str = "chat",
        key: str = "cosmicjyoti_chat_usage",
        max_bonus: Optional[int] = None,
        today: Callable[[], date] = date.today,
    ):
        self.store = store
        self.base_limit = base_limit
        self.action = action
        self.key = key if action == "chat" else f"{key}_{action}"
        self.max_bonus = max_bonus
        self._today = today

    async def usage(self) -> UsageCounter:
        """Today's counter; a stale or unreadable one reads as fresh."""
        today = self._today()
        raw = await self.store.get_json(self.key)
        if raw is not None:
            try:
                counter = UsageCounter.model_validate(raw)
            except ValidationError:
                log.warning("malformed usage counter", action=self.action)
            else:
                if counter.date == today:
                    return counter
        return UsageCounter(date=today)

    async def _write(self, counter: UsageCounter) -> None:
        try:
            await self.store.set_json(self.key, counter.model_dump(mode="json"))
        except StoreError as e:
            log.warning("failed to save usage counter", action=self.action, error=e.message)

    async def limit(self, is_unlimited: bool = False) -> int:
        if is_unlimited:
            return UNLIMITED
        counter = await self.usage()
        return counter.effective_limit(self.base_limit)

    async def can_act(self, is_unlimited: bool = False) -> bool:
        if is_unlimited:
            return True
        counter = await self.usage()
        return counter.used < counter.effective_limit(self.base_limit)

    async def remaining(self, is_unlimited: bool = False) -> int:
        """Actions left today, or ``UNLIMITED``."""
        if is_unlimited:
            return UNLIMITED
        counter = await self.usage()
        return max(0, counter.effective_limit(self.base_limit) - counter.used)

    async def increment(self) -> None:
        counter = await self.usage()
        counter.used += 1
        await self._write(counter)
        log.debug("usage incremented", action=self.action, used=counter.used)

    async def grant_bonus(self, n: int = 1) -> None:
        """Add bonus allowance for today, capped at ``max_bonus`` if set."""
        if n <= 0:
            log.warning("ignoring non-positive bonus", action=self.action, n=n)
            return
        counter = await self.usage()
        bonus = counter.bonus + n
        if self.max_bonus is not None:
            bonus = min(bonus, self.max_bonus)
        if bonus == counter.bonus:
            log.debug("bonus cap reached", action=self.action, bonus=bonus)
            return
        counter.bonus = bonus
        await self._write(counter)
        log.info("bonus granted", action=self.action, bonus=bonus)

    async def can_earn_bonus(self) -> bool:
        """True once the base allowance is used up and the bonus cap is not reached."""
        counter = await self.usage()
        if counter.used < self.base_limit:
            return False
        return self.max_bonus is None or counter.bonus < self.max_bonus

    async def reset(self) -> None:
        try:
            await self.store.remove(self.key)
        except StoreError as e:
            log.warning("failed to reset usage counter", action=self.action, error=e.message)
