"""Schemas for daily usage counters and feature grants."""

import datetime

from pydantic import BaseModel, Field


class UsageCounter(BaseModel):
    """Per-day usage of a rate-limited action."""

    date: datetime.date
    used: int = Field(0, ge=0, description="Actions taken today")
    bonus: int = Field(0, ge=0, description="Extra allowance earned today")

    def effective_limit(self, base_limit: int) -> int:
        return base_limit + self.bonus


class FeatureGrant(BaseModel):
    """Temporary unlock of a gated feature (epoch milliseconds)."""

    feature: str
    unlocked_at: int
    expires_at: int
