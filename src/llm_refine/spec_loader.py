"""Specification loader: expands ``{!path!}`` include markers."""

from __future__ import annotations

import logging
from pathlib import Path

from .errors import SpecificationError

_log = logging.getLogger(__name__)

INCLUDE_OPEN = "{!"
INCLUDE_CLOSE = "!}"
MAX_INCLUDE_DEPTH = 32
OVERFLOW_SENTINEL = "TOO MUCH NESTED INCLUDES"


class SpecLoader:
    """Resolves a specification file, splicing in included files.

    Include paths are taken relative to the directory of the file that
    contains the marker unless they are absolute.  Nesting is bounded by
    *max_depth*; past the bound the sentinel text is substituted instead
    of the file, which also bounds circular includes.
    """

    def __init__(self, max_depth: int = MAX_INCLUDE_DEPTH) -> None:
        self._max_depth = max_depth

    def resolve(self, path: str | Path) -> str:
        """Return the fully expanded text of *path*."""
        return self._resolve(Path(path), 0)

    def _resolve(self, path: Path, depth: int) -> str:
        if depth >= self._max_depth:
            _log.warning("Include depth limit reached at %s", path)
            return OVERFLOW_SENTINEL

        try:
            contents = path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            msg = f"Unable to read specification file {path}: {exc}"
            raise SpecificationError(msg) from exc

        parts: list[str] = []
        cursor = 0
        while True:
            start = contents.find(INCLUDE_OPEN, cursor)
            if start < 0:
                break
            after_start = start + len(INCLUDE_OPEN)
            end = contents.find(INCLUDE_CLOSE, after_start)
            if end < 0:
                # Unterminated marker stays as literal text
                parts.append(contents[cursor:after_start])
                cursor = after_start
                continue

            include = Path(contents[after_start:end])
            if not include.is_absolute():
                include = path.parent / include
            _log.debug("Including %s into %s (depth %d)", include, path, depth + 1)

            parts.append(contents[cursor:start])
            parts.append(self._resolve(include, depth + 1))
            cursor = end + len(INCLUDE_CLOSE)

        parts.append(contents[cursor:])
        output = "".join(parts)
        if not output.endswith("\n"):
            output += "\n"
        return output


def contains_overflow(text: str) -> bool:
    """Return True if *text* hit the include depth limit while resolving."""
    return OVERFLOW_SENTINEL in text
