"""Finite State Machine for a single refinement run."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel


class RefineState(StrEnum):
    IDLE = "idle"
    BOOTSTRAP = "bootstrap"
    PROBE_BUILD = "probe_build"
    DECIDE = "decide"
    COMMIT = "commit"
    ROLLBACK = "rollback"
    ABORT = "abort"


# Valid state transitions; BOOTSTRAP, COMMIT, ROLLBACK and ABORT are terminal
_TRANSITIONS: dict[RefineState, list[RefineState]] = {
    RefineState.IDLE: [RefineState.BOOTSTRAP, RefineState.PROBE_BUILD],
    RefineState.PROBE_BUILD: [RefineState.DECIDE],
    RefineState.DECIDE: [RefineState.COMMIT, RefineState.ROLLBACK, RefineState.ABORT],
}

TERMINAL_STATES = frozenset(
    {RefineState.BOOTSTRAP, RefineState.COMMIT, RefineState.ROLLBACK, RefineState.ABORT}
)


class FSMState(BaseModel):
    state: RefineState = RefineState.IDLE
    context: dict[str, Any] = {}

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def can_transition(self, target: RefineState) -> bool:
        return target in _TRANSITIONS.get(self.state, [])

    def transition(self, target: RefineState) -> FSMState:
        if not self.can_transition(target):
            raise ValueError(f"Invalid transition: {self.state} -> {target}")
        return FSMState(state=target, context=self.context)
