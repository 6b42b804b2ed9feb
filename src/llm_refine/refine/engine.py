"""RefinementEngine -- bootstrap or generate-verify-judge-commit one artifact."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, NoReturn

from llm_refine.errors import (
    KeptVersionStillFailingError,
    RefineError,
    VerdictAmbiguousError,
)
from llm_refine.fsm import FSMState, RefineState
from llm_refine.journal import JournalKind, RunJournal, content_digest
from llm_refine.refine.audit import AuditTrail
from llm_refine.refine.generator import Generator
from llm_refine.refine.judge import Judge
from llm_refine.refine.types import ArtifactState, Judgment, RunReport, Verdict
from llm_refine.refine.verifier import Verifier
from llm_refine.telemetry import record_event, trace_external_call, trace_refine_run

_log = logging.getLogger(__name__)


class RefinementEngine:
    """Drives one run of the refinement workflow for one artifact path.

    A missing or empty artifact is bootstrapped straight from the
    specification.  A populated one is refined: a candidate is generated,
    saved as a draft, optionally probed in place by the :class:`Verifier`,
    compared against the original by the :class:`Judge`, and then
    committed, rolled back, or aborted.

    Successful runs return a :class:`RunReport`.  A rollback that keeps a
    version with diagnostics raises :class:`KeptVersionStillFailingError`
    and an unreadable verdict raises :class:`VerdictAmbiguousError`; both
    are raised only after the side files have been settled.

    Each step is traced to an optional :class:`RunJournal`.
    """

    def __init__(
        self,
        generator: Generator,
        judge: Judge,
        verifier: Verifier | None = None,
        journal: RunJournal | None = None,
    ) -> None:
        self._generator = generator
        self._judge = judge
        self._prompts = judge.prompts
        self._verifier = verifier
        self._journal = journal
        self._fsm = FSMState()

    @property
    def state(self) -> RefineState:
        return self._fsm.state

    # ------------------------------------------------------------------
    # Entry
    # ------------------------------------------------------------------

    async def run(self, spec: str, artifact: Path | str) -> RunReport:
        audit = AuditTrail(artifact)
        self._fsm = FSMState(context={"artifact": str(audit.artifact)})

        with trace_refine_run(str(audit.artifact)):
            try:
                for stale in audit.stale_files():
                    _log.warning("Leftover %s from an earlier run will be overwritten", stale)

                initial = audit.state()
                self._record(
                    JournalKind.INPUT,
                    {
                        "artifact": str(audit.artifact),
                        "artifact_state": initial.value,
                        "spec_hash": content_digest(spec),
                        "prompt_set": self._prompts.name,
                        "verifier": type(self._verifier).__name__ if self._verifier else None,
                    },
                )

                if initial is not ArtifactState.POPULATED:
                    return await self._bootstrap(spec, audit)
                return await self._refine(spec, audit)
            except RefineError as exc:
                self._record(
                    JournalKind.ERROR,
                    {"error": type(exc).__name__, "message": str(exc), "state": self.state.value},
                )
                raise

    # ------------------------------------------------------------------
    # Bootstrap
    # ------------------------------------------------------------------

    async def _bootstrap(self, spec: str, audit: AuditTrail) -> RunReport:
        self._advance(RefineState.BOOTSTRAP)
        _log.info("Output file doesn't exist or is empty - using initial prompt")

        result = await self._generator.generate(self._prompts.bootstrap(spec))
        self._record_call("generate", result)

        audit.write_artifact(result)
        self._record(JournalKind.FILE_OP, {"op": "write_artifact", "hash": content_digest(result)})
        return RunReport(
            artifact=str(audit.artifact),
            state=RefineState.BOOTSTRAP,
            artifact_changed=True,
        )

    # ------------------------------------------------------------------
    # Refine
    # ------------------------------------------------------------------

    async def _refine(self, spec: str, audit: AuditTrail) -> RunReport:
        self._advance(RefineState.PROBE_BUILD)
        _log.info("Output file exists - using verification prompt")

        # Step 1 -- read the original, and diagnose it when a verifier is set
        original = audit.read_artifact()
        diagnostics_original: list[str] | None = None
        if self._verifier is not None:
            diagnostics_original = self._check(self._verifier, audit, "original")

        # Step 2 -- one generation call
        prompt = self._prompts.refine(spec, original, diagnostics_original)
        candidate = await self._generator.generate(prompt)
        self._record_call("generate", candidate)

        # Step 3 -- durability checkpoint before the artifact can change
        audit.write_draft(candidate)
        self._record(JournalKind.FILE_OP, {"op": "write_draft", "hash": content_digest(candidate)})

        # Step 4 -- judge, with the candidate probed in place when verifying
        diagnostics_candidate: list[str] | None = None
        verifier = self._verifier
        probed = verifier is not None
        if verifier is not None:
            with audit.probe(candidate) as probe:
                self._record(JournalKind.FILE_OP, {"op": "probe", "backup": str(audit.backup)})
                diagnostics_candidate = self._check(verifier, audit, "candidate")
                judgment = await self._judge_pair(
                    spec, original, candidate, diagnostics_original, diagnostics_candidate
                )
                if judgment.verdict is Verdict.CANDIDATE_BETTER:
                    probe.keep()
            self._record(
                JournalKind.FILE_OP,
                {"op": "discard_backup" if probe.kept else "restore_backup"},
            )
        else:
            judgment = await self._judge_pair(spec, original, candidate, None, None)

        # Step 5 -- act on the verdict
        report = RunReport(
            artifact=str(audit.artifact),
            state=RefineState.DECIDE,
            verdict=judgment.verdict,
            diagnostics_original=diagnostics_original or [],
            diagnostics_candidate=diagnostics_candidate or [],
        )
        if judgment.verdict is Verdict.CANDIDATE_BETTER:
            return self._commit(audit, candidate, original, probed, report)
        if judgment.verdict is Verdict.ORIGINAL_BETTER:
            return self._rollback(audit, report)
        self._abort(audit, judgment)

    async def _judge_pair(
        self,
        spec: str,
        original: str,
        candidate: str,
        diagnostics_original: list[str] | None,
        diagnostics_candidate: list[str] | None,
    ) -> Judgment:
        reply = await self._judge.compare(
            spec, original, candidate, diagnostics_original, diagnostics_candidate
        )
        judgment = self._prompts.classify(reply)
        _log.info("Evaluation result: %s", judgment.reply)
        self._advance(RefineState.DECIDE)
        self._record(
            JournalKind.DECISION,
            {"verdict": judgment.verdict.value, "reply": judgment.reply[:200]},
        )
        record_event("refine/verdict", {"refine.verdict": judgment.verdict.value})
        return judgment

    # ------------------------------------------------------------------
    # Terminal transitions
    # ------------------------------------------------------------------

    def _commit(
        self,
        audit: AuditTrail,
        candidate: str,
        original: str,
        probed: bool,  # noqa: FBT001
        report: RunReport,
    ) -> RunReport:
        self._advance(RefineState.COMMIT)
        _log.info("Candidate judged better, committing")
        if not probed:
            audit.write_artifact(candidate)
            self._record(
                JournalKind.FILE_OP,
                {"op": "write_artifact", "hash": content_digest(candidate)},
            )
        audit.drop_draft()
        self._record(JournalKind.FILE_OP, {"op": "drop_draft"})

        report.state = RefineState.COMMIT
        report.artifact_changed = candidate != original
        return report

    def _rollback(self, audit: AuditTrail, report: RunReport) -> RunReport:
        self._advance(RefineState.ROLLBACK)
        _log.info("Original judged better, keeping it")
        audit.touch_artifact()
        audit.reject_draft()
        self._record(JournalKind.FILE_OP, {"op": "touch_artifact"})
        self._record(JournalKind.FILE_OP, {"op": "reject_draft", "path": str(audit.rejected)})
        if _log.isEnabledFor(logging.DEBUG):
            _log.debug("Rejected changes:\n%s", audit.rejection_diff())

        report.state = RefineState.ROLLBACK
        if report.diagnostics_original:
            _log.error(
                "Kept original still has %d diagnostic(s)", len(report.diagnostics_original)
            )
            raise KeptVersionStillFailingError(report.diagnostics_original)
        return report

    def _abort(self, audit: AuditTrail, judgment: Judgment) -> NoReturn:
        self._advance(RefineState.ABORT)
        audit.reject_draft()
        self._record(JournalKind.FILE_OP, {"op": "reject_draft", "path": str(audit.rejected)})
        _log.error("Unexpected evaluation response: %s", judgment.reply)
        raise VerdictAmbiguousError(judgment.reply)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check(self, verifier: Verifier, audit: AuditTrail, label: str) -> list[str]:
        with trace_external_call("verify", type(verifier).__name__):
            diagnostics = verifier.check(audit.artifact)
        _log.info("Verifier reported %d diagnostic(s) for the %s", len(diagnostics), label)
        for message in diagnostics:
            _log.debug("%s diagnostic: %s", label, message)
        self._record(
            JournalKind.EXTERNAL_CALL,
            {"call": "verify", "version": label, "diagnostics": len(diagnostics)},
        )
        return diagnostics

    def _advance(self, target: RefineState) -> None:
        previous = self._fsm.state
        self._fsm = self._fsm.transition(target)
        self._record(JournalKind.TRANSITION, {"from": previous.value, "to": target.value})

    def _record_call(self, call: str, output: str) -> None:
        self._record(
            JournalKind.EXTERNAL_CALL,
            {"call": call, "output_hash": content_digest(output), "chars": len(output)},
        )

    def _record(self, kind: JournalKind, data: dict[str, Any]) -> None:
        if self._journal is not None:
            self._journal.add(stage=self._fsm.state.value, kind=kind.value, data=data)
