"""Exception hierarchy for the persistence and AI access layer."""

from typing import Any, Optional


class CosmicCoreError(Exception):
    """Base exception carrying a stable error code and structured details."""

    error_code: str = "COSMIC_CORE_ERROR"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


# ============================================================================
# Store errors
# ============================================================================


class StoreError(CosmicCoreError):
    """The device store failed to read or write a key."""

    error_code = "STORE_ERROR"

    def __init__(self, key: str, message: str = "Store operation failed"):
        self.key = key
        super().__init__(message=message, details={"key": key})


class StoreQuotaExceededError(StoreError):
    """The device store is out of capacity."""

    error_code = "STORE_QUOTA_EXCEEDED"

    def __init__(self, key: str, size: Optional[int] = None):
        self.size = size
        super().__init__(key=key, message=f"Store quota exceeded writing '{key}'")
        if size is not None:
            self.details["size"] = size


# ============================================================================
# AI backend errors
# ============================================================================


class LLMTimeoutError(CosmicCoreError):
    """An LLM call did not finish within its timeout."""

    error_code = "LLM_TIMEOUT"

    def __init__(self, provider: str, timeout_seconds: float):
        self.provider = provider
        self.timeout_seconds = timeout_seconds
        super().__init__(
            message=f"{provider} did not respond within {timeout_seconds}s",
            details={"provider": provider, "timeout_seconds": timeout_seconds},
        )


class EmptyResponseError(CosmicCoreError):
    """The backend returned no usable text."""

    error_code = "EMPTY_RESPONSE"

    def __init__(self, tier: str):
        self.tier = tier
        super().__init__(message=f"Empty response from {tier} tier", details={"tier": tier})


class StreamLimitExceededError(CosmicCoreError):
    """A streamed response went past the chunk or length ceiling."""

    error_code = "STREAM_LIMIT_EXCEEDED"

    def __init__(self, chunks: int, chars: int):
        self.chunks = chunks
        self.chars = chars
        super().__init__(
            message=f"Stream aborted after {chunks} chunks / {chars} chars",
            details={"chunks": chunks, "chars": chars},
        )
