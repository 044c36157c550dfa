"""Report and AI response caches."""

from cosmic_core.cache.daily_cache import DailyResponseCache
from cosmic_core.cache.report_cache import ReportCache

__all__ = ["DailyResponseCache", "ReportCache"]
