"""Tests for ProviderFactory."""

import pytest

from llm_refine.anthropic_provider import AnthropicProvider
from llm_refine.codex_provider import CodexCliProvider
from llm_refine.errors import ConfigurationError
from llm_refine.gemini_provider import GeminiProvider
from llm_refine.groq_provider import GroqProvider
from llm_refine.ollama_provider import OllamaProvider
from llm_refine.provider import StubLLMProvider
from llm_refine.provider_factory import ProviderFactory
from llm_refine.settings import RefineSettings

_KEYS = {"groq": "g", "anthropic": "a", "gemini": "m"}


@pytest.mark.parametrize(
    ("name", "cls"),
    [
        ("groq", GroqProvider),
        ("anthropic", AnthropicProvider),
        ("gemini", GeminiProvider),
        ("ollama", OllamaProvider),
        ("codex", CodexCliProvider),
        ("stub", StubLLMProvider),
        (" GROQ ", GroqProvider),
    ],
)
def test_create_each_provider(name, cls):
    provider = ProviderFactory.create(name, RefineSettings(api_keys=_KEYS))
    assert isinstance(provider, cls)


def test_unknown_provider_raises():
    with pytest.raises(ConfigurationError, match="Unknown provider 'openai'"):
        ProviderFactory.create("openai", RefineSettings())


def test_missing_key_raises_before_any_call():
    with pytest.raises(ConfigurationError, match="ANTHROPIC_API_KEY"):
        ProviderFactory.create("anthropic", RefineSettings())


def test_ollama_needs_no_key():
    provider = ProviderFactory.create("ollama", RefineSettings(ollama_url="http://box:1"))
    assert provider.name() == "ollama"


def test_generator_gets_model_override():
    settings = RefineSettings(provider="groq", model="llama-3.3-70b", api_keys=_KEYS)
    assert ProviderFactory.for_generator(settings).model == "llama-3.3-70b"


def test_judge_shares_model_with_same_backend():
    settings = RefineSettings(provider="groq", model="llama-3.3-70b", api_keys=_KEYS)
    judge = ProviderFactory.for_judge(settings)
    assert judge.name() == "groq"
    assert judge.model == "llama-3.3-70b"


def test_judge_on_other_backend_uses_its_default_model():
    settings = RefineSettings(
        provider="groq", judge_provider="anthropic", model="llama-3.3-70b", api_keys=_KEYS
    )
    judge = ProviderFactory.for_judge(settings)
    assert judge.name() == "anthropic"
    assert judge.model == "claude-sonnet-4-20250514"


def test_describe():
    assert ProviderFactory.describe(StubLLMProvider()) == "StubLLMProvider (scripted responses)"
    assert ProviderFactory.describe(CodexCliProvider()) == "CodexCliProvider (model=gpt-5.2-codex)"
