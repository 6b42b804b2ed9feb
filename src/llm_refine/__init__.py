"""llm-refine: LLM-driven generate, verify, judge and commit for one artifact."""

from __future__ import annotations

from .errors import (
    ArtifactIOError,
    ConfigurationError,
    KeptVersionStillFailingError,
    ProtocolError,
    RefineError,
    SpecificationError,
    TransportError,
    UncommittedChangesError,
    VerdictAmbiguousError,
    VerifierError,
)
from .fsm import FSMState, RefineState
from .journal import JournalEntry, JournalKind, RunJournal
from .provider import (
    ChatMessage,
    ChatRequest,
    ChatResponse,
    ChatRole,
    LLMProvider,
    StubLLMProvider,
    TokenUsage,
)
from .provider_factory import ProviderFactory
from .refine import (
    FORWARD,
    REVERSE,
    AuditTrail,
    Generator,
    Judge,
    PromptSet,
    RefinementEngine,
    RunReport,
    Verdict,
    Verifier,
)
from .settings import RefineSettings
from .spec_loader import SpecLoader
from .telemetry import RefineTracer, TelemetryConfig

__version__ = "0.1.0"

__all__ = [
    "FORWARD",
    "REVERSE",
    "ArtifactIOError",
    "AuditTrail",
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "ChatRole",
    "ConfigurationError",
    "FSMState",
    "Generator",
    "JournalEntry",
    "JournalKind",
    "Judge",
    "KeptVersionStillFailingError",
    "LLMProvider",
    "PromptSet",
    "ProtocolError",
    "ProviderFactory",
    "RefineError",
    "RefineSettings",
    "RefineState",
    "RefineTracer",
    "RefinementEngine",
    "RunJournal",
    "RunReport",
    "SpecLoader",
    "SpecificationError",
    "StubLLMProvider",
    "TelemetryConfig",
    "TokenUsage",
    "TransportError",
    "UncommittedChangesError",
    "Verdict",
    "VerdictAmbiguousError",
    "Verifier",
    "VerifierError",
]
