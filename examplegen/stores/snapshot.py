"""Snapshot baseline of compiled output."""

from __future__ import annotations

import difflib
from pathlib import Path
from typing import Iterable, List

from ..logging import get_logger
from ..models import CompiledDocument


class SnapshotStore:
    """Stores accepted compiled output and diffs new output against it."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.logger = get_logger("snapshot")

    def take(self, documents: Iterable[CompiledDocument]) -> List[Path]:
        """Write every document into the snapshot directory, replacing what is there."""
        written: List[Path] = []
        for document in documents:
            target = self._target(document)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(document.html, encoding="utf-8")
            written.append(target)
        self.logger.debug("Stored %d snapshot file(s) under %s", len(written), self.root)
        return written

    def diff(self, document: CompiledDocument) -> List[str]:
        """Return unified diff lines against the stored copy; empty when identical."""
        target = self._target(document)
        if not target.is_file():
            return [f"missing snapshot: {document.path}"]
        stored = target.read_text(encoding="utf-8")
        if stored == document.html:
            return []
        return [
            line.rstrip("\n")
            for line in difflib.unified_diff(
                stored.splitlines(keepends=True),
                document.html.splitlines(keepends=True),
                fromfile=f"{document.path} (snapshot)",
                tofile=f"{document.path} (compiled)",
            )
        ]

    def _target(self, document: CompiledDocument) -> Path:
        return self.root / document.path


__all__ = ["SnapshotStore"]
