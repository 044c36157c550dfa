"""LiteLLM-based LLM client with unified multi-provider support.

Routes to any LiteLLM-supported provider via model prefix (e.g.
gemini/gemini-2.0-flash, openai/gpt-4o-mini).
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import litellm
from openai.types.chat import ChatCompletionMessageParam

from cosmic_core.exceptions import LLMTimeoutError
from cosmic_core.utils.logger import get_logger, truncate

log = get_logger(__name__)


def _provider_from_model(model: str) -> str:
    """Extract provider prefix from a LiteLLM model string."""
    return model.split("/", 1)[0] if "/" in model else "openai"


class LiteLLMClient:
    """Thin async wrapper over ``litellm.acompletion`` with per-call timeouts."""

    def __init__(
        self,
        model: str = "gemini/gemini-2.0-flash",
        timeout: float = 60.0,
        temperature: float = 0.7,
        max_tokens: int = 1500,
    ):
        self._model = model
        self.default_timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens

    @property
    def provider_name(self) -> str:
        return _provider_from_model(self._model)

    @property
    def model(self) -> str:
        return self._model

    @asynccontextmanager
    async def _timeout(self, seconds: float):
        try:
            async with asyncio.timeout(seconds):
                yield
        except asyncio.TimeoutError:
            raise LLMTimeoutError(provider=self.provider_name, timeout_seconds=seconds)

    async def generate_completion(
        self,
        messages: list[ChatCompletionMessageParam],
        timeout: float | None = None,
    ) -> str:
        effective_timeout = timeout if timeout is not None else self.default_timeout

        log.debug(
            "litellm request",
            model=self._model,
            messages=len(messages),
            timeout=effective_timeout,
        )

        async with self._timeout(effective_timeout):
            response = await litellm.acompletion(
                model=self._model,
                messages=messages,  # type: ignore[arg-type]
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )

        content = response.choices[0].message.content or ""  # type: ignore[union-attr]
        usage = response.usage  # type: ignore[union-attr]

        log.debug(
            "litellm response",
            model=self._model,
            content=truncate(content, 2000),
            total_tokens=usage.total_tokens if usage else None,
        )

        return content

    async def generate_stream(
        self,
        messages: list[ChatCompletionMessageParam],
        timeout: float | None = None,
    ) -> AsyncIterator[str]:
        effective_timeout = timeout if timeout is not None else self.default_timeout

        log.debug(
            "litellm stream request",
            model=self._model,
            messages=len(messages),
            timeout=effective_timeout,
        )

        async with self._timeout(effective_timeout):
            response = await litellm.acompletion(
                model=self._model,
                messages=messages,  # type: ignore[arg-type]
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                stream=True,
            )

            async for chunk in response:  # type: ignore[union-attr]
                delta = chunk.choices[0].delta  # type: ignore[union-attr]
                if delta and delta.content:
                    yield delta.content
