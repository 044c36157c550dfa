"""AI backend clients."""

from cosmic_core.clients.chat_backend import ChatBackend, LiteLLMChatBackend
from cosmic_core.clients.litellm_client import LiteLLMClient

__all__ = [
    "ChatBackend",
    "LiteLLMChatBackend",
    "LiteLLMClient",
]
