"""Tests for the LiteLLM chat backend and message building."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from cosmic_core.clients.chat_backend import LiteLLMChatBackend, build_messages
from cosmic_core.schemas.chat import ChatContext, ChatMessage, SessionKey


@pytest.fixture
def context():
    return ChatContext(
        session=SessionKey("hi", "friendly", "Sun in Leo"),
        history=[
            ChatMessage(role="model", text="Namaste!"),
            ChatMessage(role="user", text="Career?"),
            ChatMessage(role="model", text=""),
        ],
    )


class TestBuildMessages:
    def test_system_message_carries_session(self, context):
        messages = build_messages("Love?", context)

        system = messages[0]
        assert system["role"] == "system"
        assert "friendly" in system["content"]
        assert "'hi'" in system["content"]
        assert "Sun in Leo" in system["content"]

    def test_history_roles_mapped_and_empty_turns_skipped(self, context):
        messages = build_messages("Love?", context)

        assert [(m["role"], m["content"]) for m in messages[1:]] == [
            ("assistant", "Namaste!"),
            ("user", "Career?"),
            ("user", "Love?"),
        ]

    def test_no_summary_line_without_context(self):
        context = ChatContext(session=SessionKey("en", "general", ""))
        messages = build_messages("hi", context)

        assert "User context" not in messages[0]["content"]
        assert len(messages) == 2


class TestLiteLLMChatBackend:
    @pytest.mark.asyncio
    async def test_complete_delegates_to_client(self, context):
        client = MagicMock()
        client.generate_completion = AsyncMock(return_value="Good times ahead")
        backend = LiteLLMChatBackend(client)

        result = await backend.complete("Love?", context)

        assert result == "Good times ahead"
        sent = client.generate_completion.call_args.args[0]
        assert sent[-1] == {"role": "user", "content": "Love?"}

    @pytest.mark.asyncio
    async def test_stream_delegates_to_client(self, context):
        async def gen(messages):
            for chunk in ["Good ", "times"]:
                yield chunk

        client = MagicMock()
        client.generate_stream = MagicMock(side_effect=gen)
        backend = LiteLLMChatBackend(client)

        chunks = [c async for c in backend.stream("Love?", context)]

        assert chunks == ["Good ", "times"]
        client.generate_stream.assert_called_once()
