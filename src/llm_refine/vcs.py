"""Git working-tree guard for the artifact path."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from .errors import ConfigurationError, UncommittedChangesError

_log = logging.getLogger(__name__)


def ensure_committed(artifact: Path, timeout: float = 30.0) -> None:
    """Refuse to touch an artifact that has uncommitted changes.

    A missing artifact passes (there is nothing to lose).  Running outside a
    git work tree, or without git installed, is a configuration error.
    """
    if not artifact.exists():
        return

    _log.info("Checking output file status with git")
    target = artifact.resolve()
    try:
        result = subprocess.run(
            ["git", "status", "--porcelain", "--", target.name],
            cwd=target.parent,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        raise ConfigurationError(f"Failed to execute git status: {exc}") from exc

    if result.returncode != 0:
        detail = result.stderr.strip() or f"exit {result.returncode}"
        raise ConfigurationError(f"git status failed for {artifact}: {detail}")
    if result.stdout.strip():
        raise UncommittedChangesError(f"Output file {artifact} has uncommitted changes")
