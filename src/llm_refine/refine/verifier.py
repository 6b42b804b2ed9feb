"""Verification backends: run a tool against the artifact on disk."""

from __future__ import annotations

import json
import logging
import re
import shlex
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from llm_refine.errors import ConfigurationError, VerifierError
from llm_refine.settings import RefineSettings

_log = logging.getLogger(__name__)

MAX_DIAGNOSTICS = 20
_BLOCK_SPLIT = re.compile(r"\n\s*\n")


class Verifier(ABC):
    """Abstract base for artifact verification.

    ``check`` returns diagnostics in the order the tool reported them,
    at most ``limit`` of them.  An empty list means the artifact is clean.
    """

    def __init__(self, limit: int = MAX_DIAGNOSTICS) -> None:
        self._limit = limit

    @abstractmethod
    def check(self, path: Path) -> list[str]:
        """Verify the file at *path*."""


class CommandVerifier(Verifier):
    """Runs a shell command; exit 0 is clean.

    ``{path}`` in the command is replaced by the quoted artifact path.  On
    failure the combined output is split into blank-line separated blocks,
    one diagnostic each.
    """

    def __init__(self, command: str, timeout: float = 300.0, limit: int = MAX_DIAGNOSTICS) -> None:
        super().__init__(limit)
        self._command = command
        self._timeout = timeout

    def check(self, path: Path) -> list[str]:
        command = self._command.replace("{path}", shlex.quote(str(path)))
        try:
            result = subprocess.run(  # noqa: S602
                command,
                shell=True,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise VerifierError(f"Verifier timed out after {self._timeout}s: {command}") from exc
        except OSError as exc:
            raise VerifierError(f"Verifier could not be started: {exc}") from exc

        if result.returncode == 0:
            return []

        output = "\n".join(s for s in (result.stdout.strip(), result.stderr.strip()) if s)
        blocks = [b.strip() for b in _BLOCK_SPLIT.split(output) if b.strip()]
        if not blocks:
            blocks = [f"exit code {result.returncode}"]
        return blocks[: self._limit]


class CargoCheckVerifier(Verifier):
    """``cargo check`` errors that point at the artifact file.

    Runs in *workdir* (the current directory by default), reads the JSON
    message stream from stdout and keeps the rendered text of
    ``error``-level compiler messages whose spans name the artifact.
    """

    def __init__(
        self,
        workdir: Path | None = None,
        timeout: float = 600.0,
        limit: int = MAX_DIAGNOSTICS,
    ) -> None:
        super().__init__(limit)
        self._workdir = workdir
        self._timeout = timeout

    def check(self, path: Path) -> list[str]:
        _log.info("Running cargo check, focus on file %s", path)
        try:
            result = subprocess.run(
                ["cargo", "check", "--message-format", "json"],
                cwd=self._workdir,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise VerifierError(f"cargo check timed out after {self._timeout}s") from exc
        except OSError as exc:
            raise VerifierError(f"cargo could not be started: {exc}") from exc

        target = path.resolve()
        base = (self._workdir or Path.cwd()).resolve()
        errors: list[str] = []
        for line in result.stdout.splitlines():
            try:
                event = json.loads(line)
            except ValueError:
                continue
            if not isinstance(event, dict) or event.get("reason") != "compiler-message":
                continue
            message = event.get("message") or {}
            rendered = message.get("rendered")
            if not rendered or not str(message.get("level", "")).startswith("error"):
                continue
            spans = message.get("spans") or []
            if any((base / s.get("file_name", "")).resolve() == target for s in spans):
                _log.debug("Compiler error: %s", rendered)
                errors.append(rendered)
        return errors[: self._limit]


class StubVerifier(Verifier):
    """Diagnostics looked up by the file's content. For testing and dry runs.

    Every content seen is appended to :attr:`checked`.
    """

    def __init__(self, flagged: dict[str, list[str]] | None = None, limit: int = MAX_DIAGNOSTICS) -> None:
        super().__init__(limit)
        self._flagged = flagged or {}
        self.checked: list[str] = []

    def check(self, path: Path) -> list[str]:
        content = path.read_bytes().decode("utf-8")
        self.checked.append(content)
        return list(self._flagged.get(content, []))[: self._limit]


def build_verifier(settings: RefineSettings, workdir: Path | None = None) -> Verifier | None:
    """Verifier named by ``settings.verifier``; ``None`` when verification is off."""
    kind = settings.verifier
    if kind == "none":
        return None
    if kind == "cargo":
        return CargoCheckVerifier(workdir=workdir)
    if kind == "command":
        if not settings.verify_command:
            raise ConfigurationError("The 'command' verifier needs LLM_REFINE_VERIFY_COMMAND")
        return CommandVerifier(settings.verify_command, timeout=settings.timeout)
    raise ConfigurationError(f"Unknown verifier '{kind}'. Valid values: cargo, command, none")
