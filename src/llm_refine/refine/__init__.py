"""Refinement engine: bootstrap, then generate-verify-judge-commit one artifact."""

from .audit import ArtifactProbe, AuditTrail
from .engine import RefinementEngine
from .generator import Generator
from .judge import Judge
from .prompts import FORWARD, PROMPT_SETS, REVERSE, PromptSet
from .transcripts import TranscriptStore
from .types import ArtifactState, Judgment, RunReport, Verdict
from .verifier import (
    CargoCheckVerifier,
    CommandVerifier,
    StubVerifier,
    Verifier,
    build_verifier,
)

__all__ = [
    "FORWARD",
    "PROMPT_SETS",
    "REVERSE",
    "ArtifactProbe",
    "ArtifactState",
    "AuditTrail",
    "CargoCheckVerifier",
    "CommandVerifier",
    "Generator",
    "Judge",
    "Judgment",
    "PromptSet",
    "RefinementEngine",
    "RunReport",
    "StubVerifier",
    "TranscriptStore",
    "Verdict",
    "Verifier",
    "build_verifier",
]
