"""Command-line entry point: ``llm-refine [options] SPEC ARTIFACT``."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .errors import KeptVersionStillFailingError, RefineError
from .fsm import RefineState
from .journal import RunJournal
from .provider_factory import VALID_PROVIDERS, ProviderFactory
from .refine.engine import RefinementEngine
from .refine.generator import Generator
from .refine.judge import Judge
from .refine.prompts import FORWARD, REVERSE
from .refine.transcripts import TranscriptStore
from .refine.types import RunReport
from .refine.verifier import build_verifier
from .settings import RefineSettings
from .spec_loader import SpecLoader, contains_overflow
from .telemetry import TelemetryConfig, configure_tracing
from .vcs import ensure_committed

_log = logging.getLogger("llm_refine")

_OUTCOMES = {
    RefineState.BOOTSTRAP: "bootstrapped",
    RefineState.COMMIT: "committed candidate to",
    RefineState.ROLLBACK: "kept original",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="llm-refine",
        description="Generate or refine one artifact from a specification with an LLM.",
    )
    parser.add_argument("spec", type=Path, help="Specification file ({!path!} includes allowed)")
    parser.add_argument("artifact", type=Path, help="Artifact file to create or refine")
    parser.add_argument(
        "--provider",
        choices=sorted(VALID_PROVIDERS),
        default=None,
        help="Generator backend (default: LLM_REFINE_PROVIDER or groq)",
    )
    parser.add_argument(
        "--judge-provider",
        choices=sorted(VALID_PROVIDERS),
        default=None,
        help="Judge backend (default: same as the generator)",
    )
    parser.add_argument("--model", default=None, help="Model override for the generator backend")
    parser.add_argument(
        "--reverse",
        action="store_true",
        help="Refine a specification from an implementation instead",
    )
    parser.add_argument(
        "--verifier",
        choices=["none", "cargo", "command"],
        default=None,
        help="Verification backend (default: LLM_REFINE_VERIFIER or none)",
    )
    parser.add_argument(
        "--verify-command",
        default=None,
        help="Shell command for the 'command' verifier; {path} is replaced by the artifact",
    )
    parser.add_argument(
        "--require-clean-git",
        action="store_true",
        help="Refuse to run when the artifact has uncommitted git changes",
    )
    parser.add_argument("--transcript-dir", type=Path, default=None, help="Save prompts and replies here")
    parser.add_argument("--journal-dir", type=Path, default=None, help="Save the run journal here")
    parser.add_argument(
        "--trace",
        choices=["none", "stdout", "otlp"],
        default="none",
        help="OpenTelemetry exporter (default: none)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def _apply_overrides(settings: RefineSettings, args: argparse.Namespace) -> RefineSettings:
    overrides = {
        "provider": args.provider,
        "judge_provider": args.judge_provider,
        "model": args.model,
        "verifier": args.verifier,
        "verify_command": args.verify_command,
    }
    return settings.model_copy(update={k: v for k, v in overrides.items() if v is not None})


def _summary(report: RunReport) -> str:
    line = f"{_OUTCOMES.get(report.state, report.state.value)} {report.artifact}"
    if report.state is RefineState.COMMIT and not report.artifact_changed:
        line += " (unchanged)"
    return line


def run(args: argparse.Namespace) -> RunReport:
    """Resolve configuration, build the engine and refine ``args.artifact`` once."""
    settings = _apply_overrides(RefineSettings.from_env(), args)

    generator_provider = ProviderFactory.for_generator(settings)
    judge_provider = ProviderFactory.for_judge(settings)
    verifier = build_verifier(settings)
    _log.info("Generator: %s", ProviderFactory.describe(generator_provider))
    _log.info("Judge: %s", ProviderFactory.describe(judge_provider))

    if args.require_clean_git:
        ensure_committed(args.artifact)

    spec = SpecLoader().resolve(args.spec)
    if contains_overflow(spec):
        _log.warning("Specification %s has includes nested too deeply; continuing", args.spec)

    transcripts = TranscriptStore(args.transcript_dir) if args.transcript_dir else None
    journal = RunJournal(artifact=str(args.artifact)) if args.journal_dir else None
    engine = RefinementEngine(
        Generator(generator_provider, max_tokens=settings.max_tokens, transcripts=transcripts),
        Judge(
            judge_provider,
            prompts=REVERSE if args.reverse else FORWARD,
            transcripts=transcripts,
        ),
        verifier=verifier,
        journal=journal,
    )
    try:
        return asyncio.run(engine.run(spec, args.artifact))
    finally:
        if journal is not None:
            _save_journal(journal, args.journal_dir, settings.journal_key)


def _save_journal(journal: RunJournal, directory: Path, key: str | None) -> None:
    try:
        if key:
            journal.sign(key)
        path = journal.save(directory)
    except (OSError, ValueError) as exc:
        _log.error("Failed to save run journal: %s", exc)
        return
    _log.info("Run journal saved to %s", path)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    tracer = None
    try:
        tracer = configure_tracing(TelemetryConfig(exporter=args.trace))
        report = run(args)
    except RefineError as exc:
        print(f"error: {exc}", file=sys.stderr)  # noqa: T201
        if isinstance(exc, KeptVersionStillFailingError):
            for message in exc.diagnostics:
                print(message, file=sys.stderr)  # noqa: T201
        return exc.exit_code
    finally:
        if tracer is not None:
            tracer.shutdown()

    print(_summary(report))  # noqa: T201
    return 0


if __name__ == "__main__":
    sys.exit(main())
