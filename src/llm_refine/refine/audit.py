"""AuditTrail: the artifact and its ``.draft`` / ``.orig`` / ``.rej`` side files.

Every replacement of a file goes through a temp file in the same
directory followed by :func:`os.replace`, so a reader never sees a
half-written artifact, draft or backup.
"""

from __future__ import annotations

import contextlib
import difflib
import logging
import os
import shutil
from collections.abc import Iterator
from pathlib import Path

from llm_refine.errors import ArtifactIOError
from llm_refine.refine.types import ArtifactState

_log = logging.getLogger(__name__)

DRAFT_SUFFIX = ".draft"
BACKUP_SUFFIX = ".orig"
REJECTED_SUFFIX = ".rej"


def _sidecar(path: Path, suffix: str) -> Path:
    return path.with_name(path.name + suffix)


@contextlib.contextmanager
def _io(action: str, path: Path) -> Iterator[None]:
    try:
        yield
    except OSError as exc:
        raise ArtifactIOError(f"Failed to {action} {path}: {exc}") from exc


def atomic_write(path: Path, data: bytes, mode_from: Path | None = None) -> None:
    """Write *data* to a sibling temp file, fsync it, then rename over *path*.

    Permission bits are copied from *mode_from*, or from an existing target.
    """
    tmp = path.with_name(f".{path.name}.tmp")
    try:
        with open(tmp, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        source = mode_from or path
        if source.exists():
            shutil.copymode(source, tmp)
        os.replace(tmp, path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


class ArtifactProbe:
    """Handle yielded by :meth:`AuditTrail.probe`; call :meth:`keep` to commit."""

    def __init__(self) -> None:
        self.kept = False

    def keep(self) -> None:
        self.kept = True


class AuditTrail:
    """File placement for one artifact path ``P``.

    ``P`` is the artifact, ``P.draft`` the candidate awaiting a decision,
    ``P.orig`` the backup held while a candidate is probed in place, and
    ``P.rej`` the last rejected candidate.
    """

    def __init__(self, artifact: Path | str) -> None:
        self.artifact = Path(artifact)
        self.draft = _sidecar(self.artifact, DRAFT_SUFFIX)
        self.backup = _sidecar(self.artifact, BACKUP_SUFFIX)
        self.rejected = _sidecar(self.artifact, REJECTED_SUFFIX)

    # -- artifact ----------------------------------------------------------

    def state(self) -> ArtifactState:
        try:
            st = self.artifact.stat()
        except FileNotFoundError:
            return ArtifactState.MISSING
        except OSError as exc:
            raise ArtifactIOError(f"Failed to stat {self.artifact}: {exc}") from exc
        if self.artifact.is_dir():
            raise ArtifactIOError(f"Artifact path {self.artifact} is a directory")
        return ArtifactState.EMPTY if st.st_size == 0 else ArtifactState.POPULATED

    def read_artifact(self) -> str:
        with _io("read", self.artifact):
            data = self.artifact.read_bytes()
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ArtifactIOError(f"Artifact {self.artifact} is not UTF-8 text") from exc

    def write_artifact(self, text: str) -> None:
        with _io("write", self.artifact):
            atomic_write(self.artifact, text.encode("utf-8"))
        _log.info("Wrote %s", self.artifact)

    def touch_artifact(self) -> None:
        """Set the artifact's mtime to now without changing its content."""
        with _io("update mtime of", self.artifact):
            os.utime(self.artifact, None)

    # -- draft / rejected --------------------------------------------------

    def write_draft(self, text: str) -> None:
        with _io("write draft", self.draft):
            atomic_write(self.draft, text.encode("utf-8"))
        _log.info("Writing draft to: %s", self.draft)

    def drop_draft(self) -> None:
        with _io("remove draft", self.draft):
            self.draft.unlink(missing_ok=True)

    def reject_draft(self) -> None:
        """Move the draft to ``P.rej``, replacing any earlier rejection."""
        with _io("reject draft", self.draft):
            os.replace(self.draft, self.rejected)
        _log.info("Draft file renamed to: %s", self.rejected)

    def rejection_diff(self) -> str:
        """Context diff from the kept artifact to the rejected candidate."""
        with _io("read", self.rejected):
            kept = self.artifact.read_bytes().decode("utf-8", errors="replace")
            rejected = self.rejected.read_bytes().decode("utf-8", errors="replace")
        return "".join(
            difflib.context_diff(
                kept.splitlines(keepends=True),
                rejected.splitlines(keepends=True),
                fromfile=str(self.artifact),
                tofile=str(self.rejected),
            )
        )

    # -- backup / probe ----------------------------------------------------

    def create_backup(self) -> None:
        with _io("back up", self.artifact):
            atomic_write(self.backup, self.artifact.read_bytes(), mode_from=self.artifact)
        _log.debug("Backed up %s to %s", self.artifact, self.backup)

    def restore_backup(self) -> None:
        with _io("restore backup", self.backup):
            os.replace(self.backup, self.artifact)
        _log.info("Restored %s from %s", self.artifact, self.backup)

    def discard_backup(self) -> None:
        with _io("remove backup", self.backup):
            self.backup.unlink(missing_ok=True)

    @contextlib.contextmanager
    def probe(self, candidate: str) -> Iterator[ArtifactProbe]:
        """Put *candidate* in place of the artifact for the duration of the block.

        The original is kept in ``P.orig``.  Leaving the block discards the
        backup if :meth:`ArtifactProbe.keep` was called and restores it in
        every other case, exceptions included.
        """
        self.create_backup()
        try:
            self.write_artifact(candidate)
        except ArtifactIOError:
            self.discard_backup()
            raise

        handle = ArtifactProbe()
        try:
            yield handle
        finally:
            if handle.kept:
                self.discard_backup()
            else:
                self.restore_backup()

    # -- housekeeping ------------------------------------------------------

    def stale_files(self) -> list[Path]:
        """Draft or backup left behind by an interrupted run."""
        return [p for p in (self.draft, self.backup) if p.exists()]
