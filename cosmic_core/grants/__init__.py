"""Ad-earned feature grants."""

from cosmic_core.grants.ad_rewards import (
    AdRewardHandler,
    ChatBonusReward,
    FeatureUnlockReward,
    FeatureUseReward,
)
from cosmic_core.grants.grant_store import GrantStore

__all__ = [
    "AdRewardHandler",
    "ChatBonusReward",
    "FeatureUnlockReward",
    "FeatureUseReward",
    "GrantStore",
]
