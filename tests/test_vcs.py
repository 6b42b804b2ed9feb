"""Tests for the git working-tree guard."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from llm_refine.errors import ConfigurationError, UncommittedChangesError
from llm_refine.vcs import ensure_committed


def _status(stdout: str = "", returncode: int = 0, stderr: str = "") -> MagicMock:
    return MagicMock(stdout=stdout, returncode=returncode, stderr=stderr)


def test_missing_artifact_passes_without_git(tmp_path: Path):
    with patch("llm_refine.vcs.subprocess.run") as run:
        ensure_committed(tmp_path / "new.rs")
    run.assert_not_called()


def test_clean_artifact_passes(tmp_path: Path):
    artifact = tmp_path / "out.rs"
    artifact.write_text("x")
    with patch("llm_refine.vcs.subprocess.run", return_value=_status()) as run:
        ensure_committed(artifact)
    assert run.call_args.args[0] == ["git", "status", "--porcelain", "--", "out.rs"]
    assert run.call_args.kwargs["cwd"] == artifact.resolve().parent


def test_modified_artifact_raises(tmp_path: Path):
    artifact = tmp_path / "out.rs"
    artifact.write_text("x")
    with patch("llm_refine.vcs.subprocess.run", return_value=_status(" M out.rs\n")), pytest.raises(
        UncommittedChangesError, match="uncommitted changes"
    ):
        ensure_committed(artifact)


def test_not_a_repository_is_configuration_error(tmp_path: Path):
    artifact = tmp_path / "out.rs"
    artifact.write_text("x")
    failed = _status(returncode=128, stderr="fatal: not a git repository")
    with patch("llm_refine.vcs.subprocess.run", return_value=failed), pytest.raises(
        ConfigurationError, match="not a git repository"
    ):
        ensure_committed(artifact)


def test_git_missing_is_configuration_error(tmp_path: Path):
    artifact = tmp_path / "out.rs"
    artifact.write_text("x")
    with patch(
        "llm_refine.vcs.subprocess.run", side_effect=FileNotFoundError("git")
    ), pytest.raises(ConfigurationError, match="Failed to execute git status"):
        ensure_committed(artifact)


def test_git_timeout_is_configuration_error(tmp_path: Path):
    artifact = tmp_path / "out.rs"
    artifact.write_text("x")
    with patch(
        "llm_refine.vcs.subprocess.run", side_effect=subprocess.TimeoutExpired("git", 1)
    ), pytest.raises(ConfigurationError):
        ensure_committed(artifact)
