"""Tiered, quota-gated access to the conversational AI backend.

One exchange walks ``IDLE -> QUOTA_CHECK -> (DENIED | TIER_PRIMARY ->
TIER_FALLBACK -> TIER_STATIC) -> IDLE``. Each tier is its own method that
returns the reply text or ``None`` when it failed, so escalation is a plain
sequence rather than nested exception handling. There is exactly one hop per
tier and no backoff: the tiers are the retry structure.
"""

import inspect
from collections.abc import AsyncIterator, Callable
from contextlib import aclosing, nullcontext
from typing import Any, Optional

from cosmic_core.chat_copy import DEFAULT_LANGUAGE, ChatCopy
from cosmic_core.clients.chat_backend import ChatBackend
from cosmic_core.exceptions import EmptyResponseError, StreamLimitExceededError
from cosmic_core.quota.usage_tracker import UsageQuotaTracker
from cosmic_core.schemas.chat import (
    ChatContext,
    ChatMessage,
    ExchangeOutcome,
    ExchangeResult,
    ExchangeState,
    SessionKey,
)
from cosmic_core.utils.logger import get_logger

log = get_logger(__name__)

Callback = Callable[[], Any]
UpdateCallback = Callable[[str], Any]


async def _notify(callback: Optional[Callable[..., Any]], *args: Any) -> None:
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


def _closing(stream: AsyncIterator[str]):
    return aclosing(stream) if hasattr(stream, "aclose") else nullcontext(stream)


class ChatOrchestrator:
    """Runs chat exchanges for one conversation.

    The session is identified by ``(language, persona, context_summary)``;
    changing any of them starts over with an empty history. Only one exchange
    runs at a time, a second ``send`` while busy is ignored.
    """

    def __init__(
        self,
        backend: ChatBackend,
        quota: UsageQuotaTracker,
        copy: Optional[ChatCopy] = None,
        max_message_chars: int = 2000,
        max_stream_chunks: int = 1000,
        max_response_chars: int = 10000,
        on_offer_bonus: Optional[Callback] = None,
        on_offer_download: Optional[Callback] = None,
    ):
        self.backend = backend
        self.quota = quota
        self.copy = copy or ChatCopy()
        self.max_message_chars = max_message_chars
        self.max_stream_chunks = max_stream_chunks
        self.max_response_chars = max_response_chars
        self.on_offer_bonus = on_offer_bonus
        self.on_offer_download = on_offer_download

        self.state = ExchangeState.IDLE
        self.session: Optional[SessionKey] = None
        self.transcript: list[ChatMessage] = []

    @property
    def busy(self) -> bool:
        return self.state is not ExchangeState.IDLE

    def configure(
        self,
        language: str = DEFAULT_LANGUAGE,
        persona: str = "general",
        context_summary: str = "",
        welcome: Optional[str] = None,
    ) -> bool:
        """Point the conversation at a session. Returns True if a new one was started."""
        key = SessionKey(language, persona, context_summary)
        if key == self.session:
            return False
        self.session = key
        self.transcript = [ChatMessage(role="model", text=welcome)] if welcome else []
        log.info("chat session started", language=language, persona=persona)
        return True

    async def send(
        self,
        message: str,
        is_unlimited: bool = False,
        on_update: Optional[UpdateCallback] = None,
    ) -> Optional[ExchangeResult]:
        """Answer one user message.

        Returns None for an empty message or when another exchange is running.
        ``on_update`` receives the reply text each time it changes.
        """
        text = message.strip()[: self.max_message_chars]
        if not text or self.busy:
            return None
        if self.session is None:
            self.configure()

        try:
            return await self._exchange(text, is_unlimited, on_update)
        finally:
            self.state = ExchangeState.IDLE

    async def _exchange(
        self, message: str, is_unlimited: bool, on_update: Optional[UpdateCallback]
    ) -> ExchangeResult:
        assert self.session is not None

        self.state = ExchangeState.QUOTA_CHECK
        if not await self.quota.can_act(is_unlimited):
            return await self._deny(is_unlimited)
        if not is_unlimited:
            await self.quota.increment()

        context = ChatContext(session=self.session, history=list(self.transcript))
        self.transcript.append(ChatMessage(role="user", text=message))
        reply = ChatMessage(role="model")
        self.transcript.append(reply)

        self.state = ExchangeState.TIER_PRIMARY
        outcome = ExchangeOutcome.PRIMARY
        answer = await self._primary(message, context, reply, on_update)

        if answer is None:
            self.state = ExchangeState.TIER_FALLBACK
            outcome = ExchangeOutcome.FALLBACK
            answer = await self._fallback(message, context)
            reply.is_fallback = True

        if answer is None:
            self.state = ExchangeState.TIER_STATIC
            outcome = ExchangeOutcome.STATIC
            answer = self.copy.unavailable_message(self.session.language)
            reply.show_download_cta = True
            log.warning("all chat tiers failed")

        if outcome is not ExchangeOutcome.PRIMARY:
            reply.text = answer
            await _notify(on_update, answer)
        if outcome is ExchangeOutcome.STATIC:
            await _notify(self.on_offer_download)

        return ExchangeResult(
            outcome=outcome,
            text=answer,
            remaining=await self.quota.remaining(is_unlimited),
        )

    async def _deny(self, is_unlimited: bool) -> ExchangeResult:
        assert self.session is not None
        self.state = ExchangeState.DENIED
        limit = await self.quota.limit(is_unlimited)
        text = self.copy.limit_message(self.session.language, limit)
        self.transcript.append(ChatMessage(role="model", text=text))
        log.info("chat quota exhausted", limit=limit)
        if not is_unlimited:
            await _notify(self.on_offer_bonus)
        return ExchangeResult(outcome=ExchangeOutcome.DENIED, text=text, remaining=0)

    async def _primary(
        self,
        message: str,
        context: ChatContext,
        reply: ChatMessage,
        on_update: Optional[UpdateCallback],
    ) -> Optional[str]:
        """Stream into ``reply`` in place. None on error, empty output or runaway stream."""
        text = ""
        chunks = 0
        try:
            async with _closing(self.backend.stream(message, context)) as stream:
                async for chunk in stream:
                    chunks += 1
                    if chunk:
                        text += chunk
                    if chunks > self.max_stream_chunks or len(text) > self.max_response_chars:
                        raise StreamLimitExceededError(chunks=chunks, chars=len(text))
                    if chunk:
                        reply.text = text
                        await _notify(on_update, text)
            if not text.strip():
                raise EmptyResponseError(tier="primary")
        except Exception as e:
            log.warning(
                "primary chat tier failed",
                error=str(e),
                error_type=type(e).__name__,
                chunks=chunks,
                chars=len(text),
            )
            return None
        log.debug("primary chat tier answered", chunks=chunks, chars=len(text))
        return text

    async def _fallback(self, message: str, context: ChatContext) -> Optional[str]:
        """One non-streaming call to the same backend. None on error or empty output."""
        try:
            text = await self.backend.complete(message, context)
            if not isinstance(text, str) or not text.strip():
                raise EmptyResponseError(tier="fallback")
        except Exception as e:
            log.warning("fallback chat tier failed", error=str(e), error_type=type(e).__name__)
            return None
        log.info("fallback chat tier answered", chars=len(text))
        return text
