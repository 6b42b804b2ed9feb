"""Tests for verification backends."""

import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from llm_refine.errors import ConfigurationError, VerifierError
from llm_refine.refine.verifier import (
    CargoCheckVerifier,
    CommandVerifier,
    StubVerifier,
    build_verifier,
)
from llm_refine.settings import RefineSettings

# ---------------------------------------------------------------------------
# CommandVerifier
# ---------------------------------------------------------------------------


def test_command_exit_zero_is_clean(tmp_path: Path):
    target = tmp_path / "a.txt"
    target.write_text("x")
    assert CommandVerifier("test -f {path}").check(target) == []


def test_command_failure_splits_blocks(tmp_path: Path):
    target = tmp_path / "a.txt"
    verifier = CommandVerifier("printf 'first\\nline\\n\\nsecond\\n'; exit 1")
    assert verifier.check(target) == ["first\nline", "second"]


def test_command_silent_failure_reports_exit_code(tmp_path: Path):
    assert CommandVerifier("exit 3").check(tmp_path / "a.txt") == ["exit code 3"]


def test_command_path_is_quoted(tmp_path: Path):
    target = tmp_path / "with space.txt"
    target.write_text("x")
    assert CommandVerifier("test -f {path}").check(target) == []


def test_command_respects_limit(tmp_path: Path):
    verifier = CommandVerifier("printf 'a\\n\\nb\\n\\nc\\n'; exit 1", limit=2)
    assert verifier.check(tmp_path / "a.txt") == ["a", "b"]


def test_command_timeout_is_verifier_error(tmp_path: Path):
    with patch(
        "llm_refine.refine.verifier.subprocess.run",
        side_effect=subprocess.TimeoutExpired("cmd", 1),
    ), pytest.raises(VerifierError, match="timed out"):
        CommandVerifier("sleep 10", timeout=1).check(tmp_path / "a.txt")


# ---------------------------------------------------------------------------
# CargoCheckVerifier
# ---------------------------------------------------------------------------


def _message(level: str, file_name: str, rendered: str) -> str:
    return json.dumps(
        {
            "reason": "compiler-message",
            "message": {
                "level": level,
                "rendered": rendered,
                "spans": [{"file_name": file_name}],
            },
        }
    )


def test_cargo_keeps_errors_for_target_only(tmp_path: Path):
    src = tmp_path / "src"
    src.mkdir()
    target = src / "lib.rs"
    target.write_text("")
    stdout = "\n".join(
        [
            _message("error", "src/lib.rs", "error[E0308]: mismatched types"),
            _message("warning", "src/lib.rs", "warning: unused variable"),
            _message("error", "src/main.rs", "error: elsewhere"),
            json.dumps({"reason": "build-finished", "success": False}),
            "not json",
        ]
    )
    result = MagicMock(returncode=101, stdout=stdout, stderr="")
    with patch("llm_refine.refine.verifier.subprocess.run", return_value=result) as run:
        diagnostics = CargoCheckVerifier(workdir=tmp_path).check(target)

    assert diagnostics == ["error[E0308]: mismatched types"]
    assert run.call_args.args[0] == ["cargo", "check", "--message-format", "json"]
    assert run.call_args.kwargs["cwd"] == tmp_path


def test_cargo_missing_is_verifier_error(tmp_path: Path):
    with patch(
        "llm_refine.refine.verifier.subprocess.run",
        side_effect=FileNotFoundError("cargo"),
    ), pytest.raises(VerifierError, match="could not be started"):
        CargoCheckVerifier(workdir=tmp_path).check(tmp_path / "lib.rs")


# ---------------------------------------------------------------------------
# StubVerifier / factory
# ---------------------------------------------------------------------------


def test_stub_verifier_looks_up_content(tmp_path: Path):
    target = tmp_path / "a.txt"
    target.write_text("bad")
    verifier = StubVerifier({"bad": ["e1"]})
    assert verifier.check(target) == ["e1"]
    target.write_text("good")
    assert verifier.check(target) == []
    assert verifier.checked == ["bad", "good"]


def test_build_verifier_none():
    assert build_verifier(RefineSettings()) is None


def test_build_verifier_cargo():
    assert isinstance(build_verifier(RefineSettings(verifier="cargo")), CargoCheckVerifier)


def test_build_verifier_command():
    settings = RefineSettings(verifier="command", verify_command="true")
    assert isinstance(build_verifier(settings), CommandVerifier)


def test_build_verifier_command_requires_command():
    with pytest.raises(ConfigurationError, match="VERIFY_COMMAND"):
        build_verifier(RefineSettings(verifier="command"))


def test_build_verifier_unknown():
    with pytest.raises(ConfigurationError, match="Unknown verifier"):
        build_verifier(RefineSettings(verifier="mypy"))
