"""Core types for the refinement engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from llm_refine.fsm import RefineState


class ArtifactState(StrEnum):
    """What is at the artifact path when a run starts."""

    MISSING = "missing"
    EMPTY = "empty"
    POPULATED = "populated"


class Verdict(StrEnum):
    """Outcome of comparing the original against the candidate."""

    ORIGINAL_BETTER = "original_better"
    CANDIDATE_BETTER = "candidate_better"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class Judgment:
    """A verdict plus the trimmed judge reply it was read from."""

    verdict: Verdict
    reply: str


@dataclass
class RunReport:
    """Result of a run that reached a successful terminal state."""

    artifact: str
    state: RefineState
    verdict: Verdict | None = None
    artifact_changed: bool = False
    diagnostics_original: list[str] = field(default_factory=list)
    diagnostics_candidate: list[str] = field(default_factory=list)
