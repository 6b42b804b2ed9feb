"""Shared plumbing for providers reached over an HTTP JSON API."""

from __future__ import annotations

import asyncio
import logging
from abc import abstractmethod
from typing import Any

import requests

from .errors import ProtocolError, TransportError
from .provider import ChatRequest, ChatResponse, LLMProvider, TokenUsage

_log = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 300.0


class HttpLLMProvider(LLMProvider):
    """LLM provider that POSTs one JSON request per chat call.

    Subclasses describe the call with :meth:`_build_call` and pull the text
    back out with :meth:`_parse`.  The blocking ``requests`` call runs in a
    worker thread so ``chat`` stays awaitable.  A connection failure or a
    non-2xx status raises :class:`TransportError`; a body that is not the
    expected JSON shape raises :class:`ProtocolError`.
    """

    _DEFAULT_MODEL = ""

    def __init__(self, model: str | None = None, timeout: float | None = None) -> None:
        self._model = model or self._DEFAULT_MODEL
        self._timeout = timeout or _DEFAULT_TIMEOUT

    @property
    def model(self) -> str:
        return self._model

    async def chat(self, request: ChatRequest) -> ChatResponse:
        url, headers, payload = self._build_call(request)
        data = await asyncio.to_thread(self._post, url, headers, payload)
        try:
            content, usage = self._parse(data)
        except (KeyError, IndexError, TypeError) as exc:
            msg = f"{self.name()} response missing expected field: {exc!r}"
            raise ProtocolError(msg) from exc
        return ChatResponse(content=content, usage=usage)

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def _build_call(self, request: ChatRequest) -> tuple[str, dict[str, str], dict[str, Any]]:
        """Return ``(url, headers, json_payload)`` for *request*."""

    @abstractmethod
    def _parse(self, data: dict[str, Any]) -> tuple[str, TokenUsage | None]:
        """Extract ``(content, usage)`` from a decoded response body."""

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _post(self, url: str, headers: dict[str, str], payload: dict[str, Any]) -> dict[str, Any]:
        _log.debug("POST %s (model=%s)", url.split("?", 1)[0], payload.get("model", self._model))
        try:
            resp = requests.post(url, headers=headers, json=payload, timeout=self._timeout)
        except requests.RequestException as exc:
            raise TransportError(f"{self.name()} request failed: {exc}") from exc

        if not resp.ok:
            detail = resp.text.strip()[:500] or "no body"
            msg = f"{self.name()} API request failed (HTTP {resp.status_code}): {detail}"
            raise TransportError(msg, status=resp.status_code)

        try:
            data = resp.json()
        except ValueError as exc:
            raise ProtocolError(f"{self.name()} returned a non-JSON body") from exc
        if not isinstance(data, dict):
            raise ProtocolError(f"{self.name()} returned unexpected JSON: {type(data).__name__}")
        return data
