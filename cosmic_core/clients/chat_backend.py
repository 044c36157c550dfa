"""Conversational backend contract and its LiteLLM implementation."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from openai.types.chat import ChatCompletionMessageParam

from cosmic_core.clients.litellm_client import LiteLLMClient
from cosmic_core.schemas.chat import ChatContext


class ChatBackend(ABC):
    """Abstract conversational AI backend."""

    @abstractmethod
    def stream(self, message: str, context: ChatContext) -> AsyncIterator[str]:
        """
        Stream a reply to ``message``.

        Args:
            message: The user's message
            context: Session identity and prior transcript

        Returns:
            Async iterator of text chunks
        """

    @abstractmethod
    async def complete(self, message: str, context: ChatContext) -> str:
        """
        Return a full reply to ``message`` in one call.

        Args:
            message: The user's message
            context: Session identity and prior transcript

        Returns:
            The reply text (may be empty)
        """


def build_messages(message: str, context: ChatContext) -> list[ChatCompletionMessageParam]:
    """Turn a chat context into an OpenAI-style message list."""
    language, persona, summary = context.session
    system = f"You are a {persona} Vedic astrology guide. Reply in language '{language}'."
    if summary:
        system += f"\nUser context: {summary}"

    messages: list[ChatCompletionMessageParam] = [{"role": "system", "content": system}]
    for turn in context.history:
        if not turn.text:
            continue
        role = "assistant" if turn.role == "model" else "user"
        messages.append({"role": role, "content": turn.text})  # type: ignore[misc]
    messages.append({"role": "user", "content": message})
    return messages


class LiteLLMChatBackend(ChatBackend):
    """Both tiers go to the same model; only the transport differs."""

    def __init__(self, client: LiteLLMClient):
        self.client = client

    def stream(self, message: str, context: ChatContext) -> AsyncIterator[str]:
        return self.client.generate_stream(build_messages(message, context))

    async def complete(self, message: str, context: ChatContext) -> str:
        return await self.client.generate_completion(build_messages(message, context))
