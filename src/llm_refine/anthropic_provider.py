"""Anthropic provider: Messages API over HTTP."""

from __future__ import annotations

from typing import Any

from .http_provider import HttpLLMProvider
from .provider import ChatRequest, ChatRole, TokenUsage

ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
_DEFAULT_MAX_TOKENS = 8192


class AnthropicProvider(HttpLLMProvider):
    """Messages API client.

    System messages are lifted into the top-level ``system`` field; the
    reply text is the concatenation of all ``text`` content blocks.
    """

    _DEFAULT_MODEL = "claude-sonnet-4-20250514"

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        timeout: float | None = None,
        url: str = ANTHROPIC_API_URL,
    ) -> None:
        super().__init__(model=model, timeout=timeout)
        self._api_key = api_key
        self._url = url

    def name(self) -> str:
        return "anthropic"

    def _build_call(self, request: ChatRequest) -> tuple[str, dict[str, str], dict[str, Any]]:
        system = [m.content for m in request.messages if m.role == ChatRole.SYSTEM]
        payload: dict[str, Any] = {
            "model": request.model or self._model,
            "max_tokens": request.max_tokens or _DEFAULT_MAX_TOKENS,
            "messages": [
                {"role": m.role.value, "content": m.content}
                for m in request.messages
                if m.role != ChatRole.SYSTEM
            ],
        }
        if system:
            payload["system"] = "\n\n".join(system)
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        headers = {
            "Content-Type": "application/json",
            "x-api-key": self._api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }
        return self._url, headers, payload

    def _parse(self, data: dict[str, Any]) -> tuple[str, TokenUsage | None]:
        blocks = data["content"]
        if not isinstance(blocks, list):
            raise TypeError("content is not a list")
        text = "".join(
            b.get("text", "") for b in blocks if isinstance(b, dict) and b.get("type") == "text"
        )
        usage = None
        if isinstance(data.get("usage"), dict):
            usage = TokenUsage(
                prompt_tokens=data["usage"].get("input_tokens", 0),
                completion_tokens=data["usage"].get("output_tokens", 0),
            )
        return text, usage
