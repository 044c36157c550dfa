"""Daily usage quotas."""

from cosmic_core.quota.usage_tracker import UNLIMITED, UsageQuotaTracker

__all__ = ["UNLIMITED", "UsageQuotaTracker"]
