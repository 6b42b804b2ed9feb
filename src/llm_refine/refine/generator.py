"""Candidate generation for the refinement engine."""

from __future__ import annotations

import logging
import time

from llm_refine.errors import ProtocolError
from llm_refine.provider import ChatRequest, LLMProvider
from llm_refine.refine.transcripts import TranscriptStore
from llm_refine.telemetry import trace_external_call

_log = logging.getLogger(__name__)


class Generator:
    """Turns a prompt into generated text with one provider call.

    There is no retry: a transport failure propagates from the provider,
    and an empty reply is a :class:`ProtocolError`.
    """

    def __init__(
        self,
        provider: LLMProvider,
        max_tokens: int | None = None,
        temperature: float | None = 0.7,
        transcripts: TranscriptStore | None = None,
    ) -> None:
        self._provider = provider
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._transcripts = transcripts

    @property
    def provider(self) -> LLMProvider:
        return self._provider

    async def generate(self, prompt: str) -> str:
        if self._transcripts:
            self._transcripts.save("gen", prompt)

        request = ChatRequest.single(
            self._provider.model,
            prompt,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )
        _log.info("Calling %s for generation", self._provider.name())
        start = time.monotonic()
        with trace_external_call("generate", self._provider.name()):
            response = await self._provider.chat(request)
        _log.debug(
            "Generation took %.0f ms (%d chars)",
            (time.monotonic() - start) * 1000,
            len(response.content),
        )

        if self._transcripts:
            self._transcripts.save("gen-resp", response.content)
        if not response.content.strip():
            raise ProtocolError(f"{self._provider.name()} returned an empty generation")
        return response.content
