"""Gemini provider: ``generateContent`` REST endpoint."""

from __future__ import annotations

from typing import Any

from .http_provider import HttpLLMProvider
from .provider import ChatRequest, ChatRole, TokenUsage

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"


class GeminiProvider(HttpLLMProvider):
    """Gemini client authenticated with an API key header.

    Assistant turns map to the ``model`` role; system messages go to
    ``systemInstruction``.  The reply is the text of the first candidate's
    parts, joined.
    """

    _DEFAULT_MODEL = "gemini-2.0-flash"

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        timeout: float | None = None,
        base_url: str = GEMINI_API_BASE,
    ) -> None:
        super().__init__(model=model, timeout=timeout)
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")

    def name(self) -> str:
        return "gemini"

    def _build_call(self, request: ChatRequest) -> tuple[str, dict[str, str], dict[str, Any]]:
        model = request.model or self._model
        contents = [
            {
                "role": "model" if m.role == ChatRole.ASSISTANT else "user",
                "parts": [{"text": m.content}],
            }
            for m in request.messages
            if m.role != ChatRole.SYSTEM
        ]
        generation: dict[str, Any] = {}
        if request.max_tokens is not None:
            generation["maxOutputTokens"] = request.max_tokens
        if request.temperature is not None:
            generation["temperature"] = request.temperature

        payload: dict[str, Any] = {"contents": contents}
        if generation:
            payload["generationConfig"] = generation
        system = [m.content for m in request.messages if m.role == ChatRole.SYSTEM]
        if system:
            payload["systemInstruction"] = {"parts": [{"text": s} for s in system]}

        url = f"{self._base_url}/{model}:generateContent"
        headers = {"Content-Type": "application/json", "x-goog-api-key": self._api_key}
        return url, headers, payload

    def _parse(self, data: dict[str, Any]) -> tuple[str, TokenUsage | None]:
        parts = data["candidates"][0]["content"]["parts"]
        text = "".join(p["text"] for p in parts if "text" in p)
        usage = None
        meta = data.get("usageMetadata")
        if isinstance(meta, dict):
            usage = TokenUsage(
                prompt_tokens=meta.get("promptTokenCount", 0),
                completion_tokens=meta.get("candidatesTokenCount", 0),
            )
        return text, usage
