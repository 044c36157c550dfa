"""Tests for factory wiring."""

from unittest.mock import patch

import pytest

from cosmic_core.clients.chat_backend import LiteLLMChatBackend
from cosmic_core.config import Settings
from cosmic_core.factories import (
    create_store_backend,
    get_ad_reward_handler,
    get_chat_orchestrator,
    get_feature_quotas,
    get_llm_client,
    get_report_cache,
)
from cosmic_core.store.backends import FileBackend, MemoryBackend, RedisBackend
from cosmic_core.tiers import AIFeature


def _settings(**overrides):
    return Settings(**overrides)


class TestCreateStoreBackend:
    def test_memory_is_default(self):
        assert isinstance(create_store_backend(_settings()), MemoryBackend)

    def test_file_backend(self, tmp_path):
        backend = create_store_backend(_settings(store_backend="file", store_path=str(tmp_path)))
        assert isinstance(backend, FileBackend)

    def test_redis_backend(self):
        backend = create_store_backend(
            _settings(store_backend="redis", redis_url="redis://localhost:6379/0")
        )
        assert isinstance(backend, RedisBackend)


class TestComponentFactories:
    def test_report_cache_uses_settings(self, store):
        settings = _settings(report_index_max=20)
        with patch("cosmic_core.factories.get_settings", return_value=settings):
            cache = get_report_cache(store)

        assert cache.max_entries == 20
        assert cache.prefix == "cosmicjyoti_report_"

    def test_feature_quotas_cover_every_feature(self, store):
        quotas = get_feature_quotas(store)

        assert set(quotas) == {f.value for f in AIFeature}
        assert quotas["chart"].base_limit == 1

    @pytest.mark.asyncio
    async def test_ad_reward_handler_shares_store(self, store):
        handler = get_ad_reward_handler(store)

        await handler.chat_quota.grant_bonus(1)

        assert await handler.chat_quota.limit() == 11

    def test_llm_client_from_settings(self):
        settings = _settings(default_llm_model="openai/gpt-4o-mini", llm_call_timeout_seconds=12)
        with patch("cosmic_core.factories.get_settings", return_value=settings):
            client = get_llm_client()

        assert client.model == "openai/gpt-4o-mini"
        assert client.default_timeout == 12.0

    def test_llm_client_model_override(self):
        assert get_llm_client("anthropic/claude-3-haiku").provider_name == "anthropic"

    def test_chat_orchestrator_defaults(self, store):
        settings = _settings(max_message_chars=500)
        with patch("cosmic_core.factories.get_settings", return_value=settings):
            orchestrator = get_chat_orchestrator(store=store)

        assert isinstance(orchestrator.backend, LiteLLMChatBackend)
        assert orchestrator.max_message_chars == 500
        assert orchestrator.quota.base_limit == 10
