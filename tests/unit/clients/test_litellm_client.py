"""Tests for LiteLLMClient."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from cosmic_core.clients.litellm_client import LiteLLMClient, _provider_from_model
from cosmic_core.exceptions import LLMTimeoutError


@pytest.fixture
def client():
    """Create a LiteLLMClient instance."""
    return LiteLLMClient(model="gemini/gemini-2.0-flash", timeout=30.0)


@pytest.fixture
def messages():
    """Sample messages list."""
    return [
        {"role": "system", "content": "You are a Vedic astrology guide."},
        {"role": "user", "content": "Namaste"},
    ]


def _stream_chunks(texts):
    chunks = []
    for text in texts:
        chunk = MagicMock()
        chunk.choices = [MagicMock()]
        chunk.choices[0].delta = MagicMock()
        chunk.choices[0].delta.content = text
        chunks.append(chunk)
    return chunks


class TestProviderParsing:
    """Tests for provider name extraction from model string."""

    def test_gemini_provider(self, client):
        assert client.provider_name == "gemini"

    def test_model_without_prefix(self):
        assert LiteLLMClient(model="gpt-4o-mini").provider_name == "openai"

    def test_model_property(self, client):
        assert client.model == "gemini/gemini-2.0-flash"

    def test_nested_model_path(self):
        assert _provider_from_model("nvidia_nim/meta/llama-3.1-8b-instruct") == "nvidia_nim"


class TestGenerateCompletion:
    """Tests for non-streaming completion."""

    @pytest.mark.asyncio
    async def test_completion_returns_content(self, client, messages):
        mock_response = MagicMock()
        mock_response.choices = [MagicMock()]
        mock_response.choices[0].message.content = "Shubh din!"
        mock_response.usage = MagicMock()
        mock_response.usage.total_tokens = 15

        with patch(
            "cosmic_core.clients.litellm_client.litellm.acompletion", new_callable=AsyncMock
        ) as mock:
            mock.return_value = mock_response
            result = await client.generate_completion(messages)

        assert result == "Shubh din!"
        mock.assert_called_once()
        call_kwargs = mock.call_args.kwargs
        assert call_kwargs["model"] == "gemini/gemini-2.0-flash"
        assert call_kwargs["temperature"] == 0.7
        assert call_kwargs["max_tokens"] == 1500
        assert "stream" not in call_kwargs

    @pytest.mark.asyncio
    async def test_none_content_becomes_empty_string(self, client, messages):
        mock_response = MagicMock()
        mock_response.choices = [MagicMock()]
        mock_response.choices[0].message.content = None
        mock_response.usage = None

        with patch(
            "cosmic_core.clients.litellm_client.litellm.acompletion", new_callable=AsyncMock
        ) as mock:
            mock.return_value = mock_response
            result = await client.generate_completion(messages)

        assert result == ""

    @pytest.mark.asyncio
    async def test_completion_timeout_raises(self, client, messages):
        with patch(
            "cosmic_core.clients.litellm_client.litellm.acompletion", new_callable=AsyncMock
        ) as mock:
            mock.side_effect = asyncio.TimeoutError()
            with pytest.raises(LLMTimeoutError) as exc_info:
                await client.generate_completion(messages, timeout=1.0)

        assert exc_info.value.details["provider"] == "gemini"


class TestGenerateStreaming:
    """Tests for streaming completion via generate_stream."""

    @pytest.mark.asyncio
    async def test_streaming_yields_tokens(self, client, messages):
        chunks = _stream_chunks(["Mars", " is", " strong"])

        async def mock_acompletion(**kwargs):
            assert kwargs["stream"] is True

            async def gen():
                for c in chunks:
                    yield c

            return gen()

        with patch(
            "cosmic_core.clients.litellm_client.litellm.acompletion", side_effect=mock_acompletion
        ):
            tokens = [t async for t in client.generate_stream(messages)]

        assert tokens == ["Mars", " is", " strong"]

    @pytest.mark.asyncio
    async def test_streaming_skips_empty_deltas(self, client, messages):
        chunks = _stream_chunks(["Mars", None, "", "strong"])

        async def mock_acompletion(**kwargs):
            async def gen():
                for c in chunks:
                    yield c

            return gen()

        with patch(
            "cosmic_core.clients.litellm_client.litellm.acompletion", side_effect=mock_acompletion
        ):
            tokens = [t async for t in client.generate_stream(messages)]

        assert tokens == ["Mars", "strong"]

    @pytest.mark.asyncio
    async def test_streaming_timeout_raises(self, client, messages):
        async def mock_acompletion(**kwargs):
            raise asyncio.TimeoutError()

        with patch(
            "cosmic_core.clients.litellm_client.litellm.acompletion", side_effect=mock_acompletion
        ):
            with pytest.raises(LLMTimeoutError):
                async for _ in client.generate_stream(messages, timeout=1.0):
                    pass
