"""Run configuration: the one place the process environment is read."""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel

from .errors import ConfigurationError

_DEFAULT_TIMEOUT = 300.0
_DEFAULT_MAX_TOKENS = 16384
_SEED_BYTES = 32

# Provider name -> environment variable holding its API key
API_KEY_VARS: dict[str, str] = {
    "groq": "GROQ_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "gemini": "GEMINI_API_KEY",
}


def _check_signing_seed(value: str) -> None:
    try:
        seed = bytes.fromhex(value)
    except ValueError as exc:
        raise ConfigurationError("LLM_REFINE_JOURNAL_KEY is not valid hex") from exc
    if len(seed) != _SEED_BYTES:
        msg = f"LLM_REFINE_JOURNAL_KEY must be a {_SEED_BYTES}-byte ed25519 seed"
        raise ConfigurationError(f"{msg}, got {len(seed)} bytes")


class RefineSettings(BaseModel):
    """Explicit configuration handed to providers, generator, judge and verifier.

    Build it with :meth:`from_env` in the CLI, or construct it directly in
    tests.  Environment variables:
        - ``LLM_REFINE_PROVIDER``: generator backend (default ``groq``)
        - ``LLM_REFINE_JUDGE_PROVIDER``: judge backend (default: same as generator)
        - ``LLM_REFINE_MODEL``: model override for the chosen backend
        - ``LLM_REFINE_TIMEOUT_SEC``: per-call timeout (default 300)
        - ``LLM_REFINE_MAX_TOKENS``: generation token cap (default 16384)
        - ``LLM_REFINE_VERIFIER``: ``none`` | ``cargo`` | ``command``
        - ``LLM_REFINE_VERIFY_COMMAND``: shell command for the ``command`` verifier
        - ``LLM_REFINE_JOURNAL_KEY``: hex ed25519 seed used to sign journals
        - ``LLM_REFINE_OLLAMA_URL``: Ollama server (default ``http://localhost:11434``)
        - ``GROQ_API_KEY`` / ``ANTHROPIC_API_KEY`` / ``GEMINI_API_KEY``
    """

    provider: str = "groq"
    judge_provider: str | None = None
    model: str | None = None
    timeout: float = _DEFAULT_TIMEOUT
    max_tokens: int = _DEFAULT_MAX_TOKENS
    verifier: str = "none"
    verify_command: str | None = None
    journal_key: str | None = None
    ollama_url: str = "http://localhost:11434"
    api_keys: dict[str, str] = {}

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RefineSettings:
        env = os.environ if environ is None else environ

        def _get(name: str) -> str | None:
            value = env.get(name, "").strip()
            return value or None

        try:
            timeout = float(_get("LLM_REFINE_TIMEOUT_SEC") or _DEFAULT_TIMEOUT)
            max_tokens = int(_get("LLM_REFINE_MAX_TOKENS") or _DEFAULT_MAX_TOKENS)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid numeric setting: {exc}") from exc

        journal_key = _get("LLM_REFINE_JOURNAL_KEY")
        if journal_key is not None:
            _check_signing_seed(journal_key)

        keys = {name: _get(var) for name, var in API_KEY_VARS.items()}
        return cls(
            provider=(_get("LLM_REFINE_PROVIDER") or "groq").lower(),
            judge_provider=(_get("LLM_REFINE_JUDGE_PROVIDER") or "").lower() or None,
            model=_get("LLM_REFINE_MODEL"),
            timeout=timeout,
            max_tokens=max_tokens,
            verifier=(_get("LLM_REFINE_VERIFIER") or "none").lower(),
            verify_command=_get("LLM_REFINE_VERIFY_COMMAND"),
            journal_key=journal_key,
            ollama_url=_get("LLM_REFINE_OLLAMA_URL") or "http://localhost:11434",
            api_keys={k: v for k, v in keys.items() if v},
        )

    @property
    def effective_judge_provider(self) -> str:
        return self.judge_provider or self.provider

    def api_key_for(self, provider: str) -> str:
        """Return the API key for *provider*, failing fast when it is unset."""
        key = self.api_keys.get(provider)
        if not key:
            var = API_KEY_VARS.get(provider, f"{provider.upper()}_API_KEY")
            raise ConfigurationError(f"{var} must be set to use the '{provider}' provider")
        return key
