"""Run journal: tamper-evident record of one refinement run.

Each entry is chained to its predecessor by SHA-256 over a canonical JSON
form, and the whole journal can be signed with an ed25519 key so that a
later reader can tell which decisions a run actually took.
"""

from __future__ import annotations

import hashlib
import json
import time
from enum import StrEnum
from pathlib import Path
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field


class JournalKind(StrEnum):
    """Constrained set of valid journal entry kinds."""

    INPUT = "input"
    TRANSITION = "transition"
    FILE_OP = "file_op"
    EXTERNAL_CALL = "external_call"
    DECISION = "decision"
    ERROR = "error"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _generate_run_id() -> str:
    """Time-sortable run id."""
    return f"{int(time.time() * 1000):012x}-{uuid4().hex[:12]}"


def _compute_entry_hash(
    timestamp: float, stage: str, kind: str, data: dict[str, Any], prev_hash: str
) -> str:
    canonical = json.dumps(
        {
            "data": data,
            "kind": kind,
            "prev_hash": prev_hash,
            "stage": stage,
            "timestamp": timestamp,
        },
        sort_keys=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(canonical.encode()).hexdigest()


def content_digest(text: str) -> str:
    """Short SHA-256 digest used to reference content without storing it."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:16]


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class JournalEntry(BaseModel):
    timestamp: float = Field(default_factory=time.time)
    stage: str
    kind: JournalKind
    data: dict[str, Any] = {}
    prev_hash: str = ""
    entry_hash: str = ""
    signature: str = ""


class RunJournal(BaseModel):
    run_id: str = Field(default_factory=_generate_run_id)
    artifact: str = ""
    entries: list[JournalEntry] = []
    signer_public_key: str = ""

    def add(self, stage: str, kind: str, data: dict[str, Any] | None = None) -> None:
        prev_hash = self.entries[-1].entry_hash if self.entries else ""
        entry = JournalEntry(
            stage=stage, kind=JournalKind(kind), data=data or {}, prev_hash=prev_hash
        )
        entry.entry_hash = _compute_entry_hash(
            entry.timestamp, entry.stage, entry.kind.value, entry.data, entry.prev_hash
        )
        self.entries.append(entry)

    def of_kind(self, kind: str) -> list[JournalEntry]:
        return [e for e in self.entries if e.kind == kind]

    def sign(self, private_key_hex: str) -> None:
        """Sign every entry hash with ed25519. Sets signer_public_key."""
        from nacl.signing import SigningKey

        signing_key = SigningKey(bytes.fromhex(private_key_hex))
        self.signer_public_key = signing_key.verify_key.encode().hex()
        for entry in self.entries:
            sig = signing_key.sign(entry.entry_hash.encode())
            entry.signature = sig.signature.hex()

    def verify(self, public_key_hex: str | None = None) -> bool:
        """Check the hash chain, and the signatures when the journal is signed."""
        for i, entry in enumerate(self.entries):
            expected_prev = self.entries[i - 1].entry_hash if i > 0 else ""
            if entry.prev_hash != expected_prev:
                return False
            expected_hash = _compute_entry_hash(
                entry.timestamp, entry.stage, entry.kind.value, entry.data, entry.prev_hash
            )
            if entry.entry_hash != expected_hash:
                return False

        pk_hex = public_key_hex or self.signer_public_key
        if pk_hex and any(e.signature for e in self.entries):
            from nacl.exceptions import BadSignatureError
            from nacl.signing import VerifyKey

            verify_key = VerifyKey(bytes.fromhex(pk_hex))
            for entry in self.entries:
                if not entry.signature:
                    return False
                try:
                    verify_key.verify(entry.entry_hash.encode(), bytes.fromhex(entry.signature))
                except BadSignatureError:
                    return False

        return True

    def to_jsonl(self) -> str:
        return "\n".join(entry.model_dump_json() for entry in self.entries)

    def save(self, directory: Path) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        out = directory / f"journal_{self.run_id}.jsonl"
        out.write_text(self.to_jsonl() + "\n", encoding="utf-8")
        return out
