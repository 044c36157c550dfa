"""Schemas for chat transcripts and exchange results."""

from enum import StrEnum
from typing import Literal, NamedTuple, Optional

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """One transcript entry. The last model entry is updated in place while streaming."""

    role: Literal["user", "model"]
    text: str = ""
    is_fallback: bool = False
    show_download_cta: bool = False


class SessionKey(NamedTuple):
    """Identity of a conversational session; any change starts a new one."""

    language: str
    persona: str
    context_summary: str


class ChatContext(BaseModel):
    """What a backend gets alongside the user's message."""

    session: SessionKey
    history: list[ChatMessage] = Field(default_factory=list)


class ExchangeState(StrEnum):
    IDLE = "idle"
    QUOTA_CHECK = "quota_check"
    DENIED = "denied"
    TIER_PRIMARY = "tier_primary"
    TIER_FALLBACK = "tier_fallback"
    TIER_STATIC = "tier_static"


class ExchangeOutcome(StrEnum):
    DENIED = "denied"
    PRIMARY = "primary"
    FALLBACK = "fallback"
    STATIC = "static"


class ExchangeResult(BaseModel):
    """How a single user message was answered."""

    outcome: ExchangeOutcome
    text: str
    remaining: int = Field(..., description="Messages left today, -1 when unlimited")
    error: Optional[str] = None
