"""Provider factory: deterministic provider selection from settings."""

from __future__ import annotations

from .anthropic_provider import AnthropicProvider
from .codex_provider import CodexCliProvider
from .errors import ConfigurationError
from .gemini_provider import GeminiProvider
from .groq_provider import GroqProvider
from .ollama_provider import OllamaProvider
from .provider import LLMProvider, StubLLMProvider
from .settings import RefineSettings

VALID_PROVIDERS = frozenset({"anthropic", "codex", "gemini", "groq", "ollama", "stub"})


class ProviderFactory:
    """Creates LLM providers from a :class:`RefineSettings`.

    Resolution is explicit: the name must be one of :data:`VALID_PROVIDERS`
    and keyed backends need their API key present in the settings.  Both
    failures raise :class:`ConfigurationError` before any file is touched.
    """

    @staticmethod
    def create(name: str, settings: RefineSettings, model: str | None = None) -> LLMProvider:
        name = name.strip().lower()
        if name not in VALID_PROVIDERS:
            msg = (
                f"Unknown provider '{name}'. "
                f"Valid values: {', '.join(sorted(VALID_PROVIDERS))}"
            )
            raise ConfigurationError(msg)

        timeout = settings.timeout
        if name == "groq":
            return GroqProvider(settings.api_key_for("groq"), model=model, timeout=timeout)
        if name == "anthropic":
            return AnthropicProvider(
                settings.api_key_for("anthropic"), model=model, timeout=timeout
            )
        if name == "gemini":
            return GeminiProvider(settings.api_key_for("gemini"), model=model, timeout=timeout)
        if name == "ollama":
            return OllamaProvider(base_url=settings.ollama_url, model=model, timeout=timeout)
        if name == "codex":
            return CodexCliProvider(model=model, timeout=timeout)
        return StubLLMProvider()

    @staticmethod
    def for_generator(settings: RefineSettings) -> LLMProvider:
        return ProviderFactory.create(settings.provider, settings, model=settings.model)

    @staticmethod
    def for_judge(settings: RefineSettings) -> LLMProvider:
        """Judge provider; the model override only applies when it shares the backend."""
        name = settings.effective_judge_provider
        model = settings.model if name == settings.provider else None
        return ProviderFactory.create(name, settings, model=model)

    @staticmethod
    def describe(provider: LLMProvider) -> str:
        """Human-readable description for log output."""
        if provider.name() == "stub":
            return "StubLLMProvider (scripted responses)"
        return f"{type(provider).__name__} (model={provider.model})"
