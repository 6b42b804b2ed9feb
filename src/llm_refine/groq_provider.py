"""Groq provider: OpenAI-compatible chat completions endpoint."""

from __future__ import annotations

from typing import Any

from .http_provider import HttpLLMProvider
from .provider import ChatRequest, TokenUsage

GROQ_API_URL = "https://api.groq.com/openai/v1/chat/completions"


class GroqProvider(HttpLLMProvider):
    """Chat completions against Groq with a bearer API key."""

    _DEFAULT_MODEL = "moonshotai/kimi-k2-instruct"

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        timeout: float | None = None,
        url: str = GROQ_API_URL,
    ) -> None:
        super().__init__(model=model, timeout=timeout)
        self._api_key = api_key
        self._url = url

    def name(self) -> str:
        return "groq"

    def _build_call(self, request: ChatRequest) -> tuple[str, dict[str, str], dict[str, Any]]:
        payload: dict[str, Any] = {
            "model": request.model or self._model,
            "messages": [{"role": m.role.value, "content": m.content} for m in request.messages],
        }
        if request.max_tokens is not None:
            payload["max_tokens"] = request.max_tokens
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        headers = {"Authorization": f"Bearer {self._api_key}"}
        return self._url, headers, payload

    def _parse(self, data: dict[str, Any]) -> tuple[str, TokenUsage | None]:
        content = data["choices"][0]["message"]["content"]
        if not isinstance(content, str):
            raise TypeError("message.content is not a string")
        usage = None
        if isinstance(data.get("usage"), dict):
            usage = TokenUsage(
                prompt_tokens=data["usage"].get("prompt_tokens", 0),
                completion_tokens=data["usage"].get("completion_tokens", 0),
            )
        return content, usage
