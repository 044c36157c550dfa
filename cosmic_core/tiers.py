"""User tier definitions and policy resolution.

Single source of truth for tier limits. The tier itself comes from the
subscription layer; components only ever see ``is_unlimited``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cosmic_core.config import Settings


class UserTier(StrEnum):
    FREE = "free"
    PREMIUM = "premium"


class AIFeature(StrEnum):
    """AI modules with their own free daily allowance."""

    CHART = "chart"  # shared by kundali and compatibility
    HOROSCOPE = "horoscope"
    DREAM = "dream"
    TAROT = "tarot"
    PALM = "palm"
    FACE = "face"
    NUMEROLOGY = "numerology"
    COSMIC_HEALTH = "cosmic_health"
    GAMES = "games"


@dataclass(frozen=True, slots=True)
class TierPolicy:
    daily_chats: int | None  # None = unlimited
    bonus_per_ad: int
    daily_feature_uses: int | None  # per AIFeature, None = unlimited
    max_feature_ad_bonus: int  # extra feature uses per day after an ad

    @property
    def is_unlimited(self) -> bool:
        return self.daily_chats is None


FREE_CHAT_LIMIT = 10
BONUS_MESSAGES_PER_AD = 1

TIER_POLICIES: dict[str, TierPolicy] = {
    UserTier.FREE: TierPolicy(
        daily_chats=FREE_CHAT_LIMIT,
        bonus_per_ad=BONUS_MESSAGES_PER_AD,
        daily_feature_uses=1,
        max_feature_ad_bonus=1,
    ),
    UserTier.PREMIUM: TierPolicy(
        daily_chats=None,
        bonus_per_ad=0,
        daily_feature_uses=None,
        max_feature_ad_bonus=0,
    ),
}


def get_policy(tier: str | None, settings: Settings | None = None) -> TierPolicy:
    """Resolve the policy for a tier; unknown or missing tiers are free.

    ``settings`` overrides the free chat allowance when given.
    """
    policy = TIER_POLICIES.get(tier or UserTier.FREE, TIER_POLICIES[UserTier.FREE])
    if settings is not None and policy.daily_chats is not None:
        return TierPolicy(
            daily_chats=settings.free_chat_limit,
            bonus_per_ad=settings.bonus_messages_per_ad,
            daily_feature_uses=policy.daily_feature_uses,
            max_feature_ad_bonus=policy.max_feature_ad_bonus,
        )
    return policy
