"""Routes a completed rewarded ad to the reward it was shown for."""

from dataclasses import dataclass
from typing import Optional, Union

from cosmic_core.grants.grant_store import GrantStore
from cosmic_core.quota.usage_tracker import UsageQuotaTracker
from cosmic_core.utils.logger import get_logger

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ChatBonusReward:
    count: int = 1


@dataclass(frozen=True, slots=True)
class FeatureUnlockReward:
    feature: str


@dataclass(frozen=True, slots=True)
class FeatureUseReward:
    """One extra use of a daily-limited AI feature."""

    feature: str


AdReward = Union[ChatBonusReward, FeatureUnlockReward, FeatureUseReward]


class AdRewardHandler:
    """Fan-out target for the ad SDK's "watched successfully" signal."""

    def __init__(
        self,
        chat_quota: UsageQuotaTracker,
        grants: GrantStore,
        feature_quotas: Optional[dict[str, UsageQuotaTracker]] = None,
    ):
        self.chat_quota = chat_quota
        self.grants = grants
        self.feature_quotas = feature_quotas or {}

    async def on_ad_completed(self, reward: AdReward) -> None:
        match reward:
            case ChatBonusReward(count=count):
                await self.chat_quota.grant_bonus(count)
            case FeatureUnlockReward(feature=feature):
                await self.grants.unlock(feature)
            case FeatureUseReward(feature=feature):
                tracker = self.feature_quotas.get(feature)
                if tracker is None:
                    raise KeyError(f"no usage tracker for feature '{feature}'")
                await tracker.grant_bonus(1)
            case _:
                raise TypeError(f"unknown ad reward: {reward!r}")
        log.info("ad reward applied", reward=type(reward).__name__)
