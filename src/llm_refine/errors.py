"""Error taxonomy for llm-refine.

Every failure a run can end with is a :class:`RefineError` carrying the
process exit code the CLI reports for it.
"""

from __future__ import annotations


class RefineError(Exception):
    """Base class for all llm-refine failures."""

    exit_code: int = 1


class ConfigurationError(RefineError):
    """Missing or invalid configuration (credentials, provider names)."""

    exit_code = 2


class SpecificationError(RefineError):
    """The input specification (or one of its includes) could not be read."""

    exit_code = 3


class ArtifactIOError(RefineError):
    """The artifact or one of its side files could not be read or written."""

    exit_code = 3


class TransportError(RefineError):
    """An external capability was unreachable or answered with a failure."""

    exit_code = 4

    def __init__(self, message: str, status: int | None = None) -> None:
        self.status = status
        super().__init__(message)


class VerifierError(TransportError):
    """The verification tool could not be run to completion."""


class ProtocolError(RefineError):
    """An external reply did not have the expected shape."""

    exit_code = 5


class VerdictAmbiguousError(RefineError):
    """The judge answered with neither of the two accepted sentences."""

    exit_code = 6

    def __init__(self, reply: str) -> None:
        self.reply = reply
        super().__init__(f"Unexpected evaluation response: {reply!r}")


class KeptVersionStillFailingError(RefineError):
    """The original was judged better but still fails verification."""

    exit_code = 7

    def __init__(self, diagnostics: list[str]) -> None:
        self.diagnostics = list(diagnostics)
        super().__init__(
            f"Original kept but it still has {len(self.diagnostics)} diagnostic(s)"
        )


class UncommittedChangesError(RefineError):
    """The artifact has uncommitted changes in its git working tree."""

    exit_code = 8
