"""Local-first report cache, usage quotas, ad grants and tiered AI chat access."""

from cosmic_core.cache import DailyResponseCache, ReportCache
from cosmic_core.grants import AdRewardHandler, GrantStore
from cosmic_core.quota import UNLIMITED, UsageQuotaTracker
from cosmic_core.services import ChatOrchestrator
from cosmic_core.store import DurableStore
from cosmic_core.utils.fingerprint import fingerprint

__all__ = [
    "UNLIMITED",
    "AdRewardHandler",
    "ChatOrchestrator",
    "DailyResponseCache",
    "DurableStore",
    "GrantStore",
    "ReportCache",
    "UsageQuotaTracker",
    "fingerprint",
]
