"""LLM Provider abstraction: pluggable backend for real and stub LLMs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import StrEnum

from pydantic import BaseModel

from .errors import ProtocolError

# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


class ChatRole(StrEnum):
    """Role of a message participant."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """Single message in a conversation."""

    role: ChatRole
    content: str


class ChatRequest(BaseModel):
    """Request payload sent to an LLM provider."""

    model: str
    messages: list[ChatMessage]
    max_tokens: int | None = None
    temperature: float | None = None

    @classmethod
    def single(
        cls,
        model: str,
        prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> ChatRequest:
        """Build a request holding one user message."""
        return cls(
            model=model,
            messages=[ChatMessage(role=ChatRole.USER, content=prompt)],
            max_tokens=max_tokens,
            temperature=temperature,
        )

    def prompt_text(self) -> str:
        """Flatten messages into a single prompt string."""
        parts: list[str] = []
        for msg in self.messages:
            if msg.role == ChatRole.USER:
                parts.append(msg.content)
            else:
                parts.append(f"[{msg.role.value.capitalize()}] {msg.content}")
        return "\n\n".join(parts)


class TokenUsage(BaseModel):
    """Token consumption metrics for a single request."""

    prompt_tokens: int
    completion_tokens: int


class ChatResponse(BaseModel):
    """Response returned from an LLM provider."""

    content: str
    usage: TokenUsage | None = None


# ---------------------------------------------------------------------------
# LLMProvider ABC
# ---------------------------------------------------------------------------


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    def name(self) -> str:
        """Return the canonical provider name (e.g. 'groq', 'anthropic')."""

    @property
    @abstractmethod
    def model(self) -> str:
        """Return the configured model name."""

    @abstractmethod
    async def chat(self, request: ChatRequest) -> ChatResponse:
        """Send a chat completion request."""


# ---------------------------------------------------------------------------
# Stub implementation (for testing / offline development)
# ---------------------------------------------------------------------------


class StubLLMProvider(LLMProvider):
    """Replays scripted replies without making real calls.

    Replies are consumed in order; with no script a canned reply is
    returned every time.  Every request is kept in :attr:`requests`.
    """

    _CANNED = "This is a stub response for testing purposes."

    def __init__(self, replies: list[str] | None = None) -> None:
        self._replies = list(replies) if replies is not None else None
        self.requests: list[ChatRequest] = []

    def name(self) -> str:
        return "stub"

    @property
    def model(self) -> str:
        return "stub"

    async def chat(self, request: ChatRequest) -> ChatResponse:
        self.requests.append(request)
        if self._replies is None:
            reply = self._CANNED
        elif self._replies:
            reply = self._replies.pop(0)
        else:
            raise ProtocolError("Stub provider has no scripted reply left")

        prompt_tokens = sum(len(m.content.split()) for m in request.messages)
        return ChatResponse(
            content=reply,
            usage=TokenUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=len(reply.split()),
            ),
        )
