"""Ollama provider: local ``/api/generate`` server, no credentials."""

from __future__ import annotations

from typing import Any

from .http_provider import HttpLLMProvider
from .provider import ChatRequest, TokenUsage


class OllamaProvider(HttpLLMProvider):
    """Non-streaming completions from a local Ollama server."""

    _DEFAULT_MODEL = "qwen2.5-coder:14b"

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str | None = None,
        timeout: float | None = None,
    ) -> None:
        super().__init__(model=model, timeout=timeout)
        self._base_url = base_url.rstrip("/")

    def name(self) -> str:
        return "ollama"

    def _build_call(self, request: ChatRequest) -> tuple[str, dict[str, str], dict[str, Any]]:
        options: dict[str, Any] = {}
        if request.temperature is not None:
            options["temperature"] = request.temperature
        if request.max_tokens is not None:
            options["num_predict"] = request.max_tokens
        payload: dict[str, Any] = {
            "model": request.model or self._model,
            "prompt": request.prompt_text(),
            "stream": False,
        }
        if options:
            payload["options"] = options
        return f"{self._base_url}/api/generate", {}, payload

    def _parse(self, data: dict[str, Any]) -> tuple[str, TokenUsage | None]:
        content = data["response"]
        if not isinstance(content, str):
            raise TypeError("response is not a string")
        usage = None
        if "prompt_eval_count" in data or "eval_count" in data:
            usage = TokenUsage(
                prompt_tokens=data.get("prompt_eval_count", 0),
                completion_tokens=data.get("eval_count", 0),
            )
        return content, usage
