"""Library configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables (prefixed ``COSMIC_``)."""

    model_config = SettingsConfigDict(
        env_prefix="COSMIC_", env_file=".env", case_sensitive=False, extra="ignore"
    )

    # Device store
    store_backend: Literal["memory", "file", "redis"] = "memory"
    store_path: str = ".cosmic_store"
    store_capacity_bytes: Optional[int] = 5 * 1024 * 1024  # typical device storage quota
    redis_url: str = "redis://localhost:6379/0"

    # Key namespaces (must stay stable across releases, changing them orphans user data)
    report_prefix: str = "cosmicjyoti_report_"
    report_index_key: str = "cosmicjyoti_reportindex"
    usage_key: str = "cosmicjyoti_chat_usage"
    grants_key: str = "cosmicjyoti_ad_unlocks"
    ai_cache_key: str = "cosmicjyoti_ai_cache"

    # Report cache
    report_index_max: int = 100
    eviction_floor: int = 5
    eviction_batch: int = 10

    # Day-scoped AI response cache
    daily_cache_max_entries: int = 50
    daily_cache_keep: int = 40

    # Quotas and grants
    free_chat_limit: int = 10
    bonus_messages_per_ad: int = 1
    ad_unlock_minutes: int = 5

    # Chat orchestration
    max_message_chars: int = 2000
    max_stream_chunks: int = 1000
    max_response_chars: int = 10000

    # LLM (LiteLLM-format model string: "provider/model")
    default_llm_model: str = "gemini/gemini-2.0-flash"
    llm_temperature: float = 0.7
    llm_max_tokens: int = 1500
    llm_call_timeout_seconds: int = 60

    # App
    debug: bool = False
    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
