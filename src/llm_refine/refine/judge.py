"""Judge: asks a provider which of two versions better fits the source."""

from __future__ import annotations

import logging

from llm_refine.provider import ChatRequest, LLMProvider
from llm_refine.refine.prompts import FORWARD, PromptSet
from llm_refine.refine.transcripts import TranscriptStore
from llm_refine.telemetry import trace_external_call

_log = logging.getLogger(__name__)


class Judge:
    """Comparator over an LLM provider.

    ``compare`` returns the raw reply; reading it into a verdict is the
    job of :meth:`PromptSet.classify` on :attr:`prompts`.
    """

    def __init__(
        self,
        provider: LLMProvider,
        prompts: PromptSet = FORWARD,
        max_tokens: int | None = 100,
        temperature: float | None = 0.1,
        transcripts: TranscriptStore | None = None,
    ) -> None:
        self._provider = provider
        self._prompts = prompts
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._transcripts = transcripts

    @property
    def prompts(self) -> PromptSet:
        return self._prompts

    @property
    def provider(self) -> LLMProvider:
        return self._provider

    async def compare(
        self,
        spec: str,
        first: str,
        second: str,
        first_diagnostics: list[str] | None = None,
        second_diagnostics: list[str] | None = None,
    ) -> str:
        prompt = self._prompts.evaluate(spec, first, second, first_diagnostics, second_diagnostics)
        if self._transcripts:
            self._transcripts.save("eval", prompt)

        request = ChatRequest.single(
            self._provider.model,
            prompt,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )
        _log.info("Calling %s for evaluation", self._provider.name())
        with trace_external_call("judge", self._provider.name()):
            response = await self._provider.chat(request)

        if self._transcripts:
            self._transcripts.save("eval-resp", response.content)
        return response.content
