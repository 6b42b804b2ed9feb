"""Codex CLI provider: runs ``codex exec`` as a subprocess."""

from __future__ import annotations

import asyncio
import contextlib
import json
import shutil
import subprocess
import sys

from .errors import ProtocolError, TransportError
from .provider import ChatRequest, ChatResponse, LLMProvider, TokenUsage

_DEFAULT_MODEL = "gpt-5.2-codex"
_DEFAULT_TIMEOUT = 300.0


class CodexCliProvider(LLMProvider):
    """LLM provider that delegates to the ``codex`` CLI.

    Uses the CLI's own login, so no API key is configured here.  The
    reply is the text of the ``agent_message`` items in the ``--json``
    event stream; a run that produced none is a protocol failure.
    """

    def __init__(self, model: str | None = None, timeout: float | None = None) -> None:
        self._model = model or _DEFAULT_MODEL
        self._timeout = timeout or _DEFAULT_TIMEOUT

    def name(self) -> str:
        return "codex"

    @property
    def model(self) -> str:
        return self._model

    def is_available(self) -> bool:
        """Check if the codex CLI is on PATH (``codex.cmd`` on Windows)."""
        return shutil.which("codex") is not None or shutil.which("codex.cmd") is not None

    async def chat(self, request: ChatRequest) -> ChatResponse:
        """Send a chat request via ``codex exec --json``."""
        codex_bin = shutil.which("codex") or shutil.which("codex.cmd")
        if codex_bin is None:
            raise TransportError("codex CLI not found on PATH")

        prompt = request.prompt_text()
        model = request.model or self._model
        # read-only sandbox: the reply is text, the CLI must not touch the tree
        args = [codex_bin, "exec", prompt, "-m", model, "--json", "--sandbox", "read-only"]
        try:
            proc = await self._spawn(args)
        except OSError as exc:
            raise TransportError(f"codex exec could not be started: {exc}") from exc
        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                proc.communicate(), timeout=self._timeout
            )
        except TimeoutError as exc:
            # the child must not outlive the failed run
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
            raise TransportError(f"codex exec timed out after {self._timeout}s") from exc

        stdout = stdout_bytes.decode("utf-8", errors="replace").strip()
        stderr = stderr_bytes.decode("utf-8", errors="replace").strip()

        if proc.returncode != 0:
            detail = stderr or stdout or "unknown error"
            msg = f"codex exec failed (exit {proc.returncode}): {detail}"
            raise TransportError(msg, status=proc.returncode)

        content, usage = self._parse_jsonl_response(stdout)
        return ChatResponse(content=content, usage=usage)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    async def _spawn(args: list[str]) -> asyncio.subprocess.Process:
        """Spawn a subprocess, going through ``cmd.exe`` for .CMD/.BAT scripts."""
        if sys.platform == "win32" and args[0].lower().endswith((".cmd", ".bat")):
            return await asyncio.create_subprocess_shell(
                subprocess.list2cmdline(args),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        return await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )

    @staticmethod
    def _parse_jsonl_response(stdout: str) -> tuple[str, TokenUsage]:
        """Collect ``agent_message`` text and ``turn.completed`` token usage."""
        content_parts: list[str] = []
        prompt_tokens = 0
        completion_tokens = 0

        for line in stdout.splitlines():
            line = line.strip()
            if not line:
                continue
            try:
                event = json.loads(line)
            except ValueError:
                continue
            if not isinstance(event, dict):
                continue

            event_type = event.get("type", "")
            if event_type == "item.completed":
                item = event.get("item", {})
                if item.get("type") == "agent_message" and item.get("text"):
                    content_parts.append(item["text"])
            elif event_type == "turn.completed":
                usage = event.get("usage", {})
                prompt_tokens += usage.get("input_tokens", 0)
                completion_tokens += usage.get("output_tokens", 0)

        if not content_parts:
            raise ProtocolError("codex exec produced no agent_message")
        return "\n".join(content_parts), TokenUsage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
        )
