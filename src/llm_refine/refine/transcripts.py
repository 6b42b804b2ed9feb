"""Request/response transcripts for generator and judge calls."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from llm_refine.errors import ArtifactIOError

_log = logging.getLogger(__name__)


class TranscriptStore:
    """Writes each prompt and reply to ``<dir>/llm-req-<pid>-<name>.txt``.

    Names used by the engine: ``gen``, ``gen-resp``, ``eval``, ``eval-resp``.
    Files are overwritten if the same process runs twice.
    """

    def __init__(self, directory: Path | str, tag: str | None = None) -> None:
        self._dir = Path(directory)
        self._tag = tag or f"llm-req-{os.getpid()}"

    def path_for(self, name: str) -> Path:
        return self._dir / f"{self._tag}-{name}.txt"

    def save(self, name: str, text: str) -> Path:
        path = self.path_for(name)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise ArtifactIOError(f"Failed to write transcript {path}: {exc}") from exc
        _log.info("Saved %s to %s", name, path)
        return path
