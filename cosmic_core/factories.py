"""Factory functions wiring components from settings."""

from datetime import timedelta
from functools import lru_cache
from typing import Optional

from redis.asyncio import Redis

from cosmic_core.cache.daily_cache import DailyResponseCache
from cosmic_core.cache.report_cache import ReportCache
from cosmic_core.chat_copy import ChatCopy
from cosmic_core.clients.chat_backend import ChatBackend, LiteLLMChatBackend
from cosmic_core.clients.litellm_client import LiteLLMClient
from cosmic_core.config import Settings, get_settings
from cosmic_core.grants.ad_rewards import AdRewardHandler
from cosmic_core.grants.grant_store import GrantStore
from cosmic_core.quota.usage_tracker import UsageQuotaTracker
from cosmic_core.services.chat_orchestrator import Callback, ChatOrchestrator
from cosmic_core.store.backends import FileBackend, MemoryBackend, RedisBackend, StoreBackend
from cosmic_core.store.durable_store import DurableStore
from cosmic_core.tiers import AIFeature, get_policy


def create_store_backend(settings: Settings) -> StoreBackend:
    """Build the configured raw backend."""
    if settings.store_backend == "file":
        return FileBackend(settings.store_path, capacity_bytes=settings.store_capacity_bytes)
    if settings.store_backend == "redis":
        return RedisBackend(Redis.from_url(settings.redis_url, decode_responses=True))
    return MemoryBackend(capacity_bytes=settings.store_capacity_bytes)


@lru_cache(maxsize=1)
def get_store() -> DurableStore:
    """
    Create the process-wide device store.

    Returns:
        DurableStore shared by every component
    """
    return DurableStore(create_store_backend(get_settings()))


def get_report_cache(store: Optional[DurableStore] = None) -> ReportCache:
    settings = get_settings()
    return ReportCache(
        store or get_store(),
        prefix=settings.report_prefix,
        index_key=settings.report_index_key,
        max_entries=settings.report_index_max,
        eviction_floor=settings.eviction_floor,
        eviction_batch=settings.eviction_batch,
    )


def get_daily_cache(store: Optional[DurableStore] = None) -> DailyResponseCache:
    settings = get_settings()
    return DailyResponseCache(
        store or get_store(),
        key=settings.ai_cache_key,
        max_entries=settings.daily_cache_max_entries,
        keep=settings.daily_cache_keep,
    )


def get_chat_quota(store: Optional[DurableStore] = None) -> UsageQuotaTracker:
    settings = get_settings()
    return UsageQuotaTracker(
        store or get_store(), base_limit=settings.free_chat_limit, key=settings.usage_key
    )


def get_feature_quotas(store: Optional[DurableStore] = None) -> dict[str, UsageQuotaTracker]:
    """One tracker per AI feature, using the free tier's daily allowance."""
    settings = get_settings()
    policy = get_policy(None, settings)
    return {
        feature: UsageQuotaTracker(
            store or get_store(),
            base_limit=policy.daily_feature_uses or 0,
            action=feature,
            key=settings.usage_key,
            max_bonus=policy.max_feature_ad_bonus,
        )
        for feature in AIFeature
    }


def get_grant_store(store: Optional[DurableStore] = None) -> GrantStore:
    settings = get_settings()
    return GrantStore(
        store or get_store(),
        duration=timedelta(minutes=settings.ad_unlock_minutes),
        key=settings.grants_key,
    )


def get_ad_reward_handler(store: Optional[DurableStore] = None) -> AdRewardHandler:
    return AdRewardHandler(
        chat_quota=get_chat_quota(store),
        grants=get_grant_store(store),
        feature_quotas=get_feature_quotas(store),
    )


def get_llm_client(model: Optional[str] = None) -> LiteLLMClient:
    """
    Create LLM client for the given LiteLLM model.

    Args:
        model: LiteLLM-format model string. Uses default_llm_model if None.
    """
    settings = get_settings()
    return LiteLLMClient(
        model=model or settings.default_llm_model,
        timeout=float(settings.llm_call_timeout_seconds),
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
    )


def get_chat_orchestrator(
    backend: Optional[ChatBackend] = None,
    store: Optional[DurableStore] = None,
    copy: Optional[ChatCopy] = None,
    on_offer_bonus: Optional[Callback] = None,
    on_offer_download: Optional[Callback] = None,
) -> ChatOrchestrator:
    settings = get_settings()
    return ChatOrchestrator(
        backend=backend or LiteLLMChatBackend(get_llm_client()),
        quota=get_chat_quota(store),
        copy=copy,
        max_message_chars=settings.max_message_chars,
        max_stream_chunks=settings.max_stream_chunks,
        max_response_chars=settings.max_response_chars,
        on_offer_bonus=on_offer_bonus,
        on_offer_download=on_offer_download,
    )
