"""Sample discovery and metadata loading."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterator

from .errors import MetadataError, MissingDirectoryError, SampleError
from .logging import get_logger
from .models import Metadata, Sample

DEFAULT_PATTERN = "**/*.html"
_METADATA_SUFFIX = ".json"


class SampleLoader:
    """Finds sample documents under a source root and pairs them with metadata."""

    def __init__(self, root: Path, pattern: str = DEFAULT_PATTERN) -> None:
        self.root = root
        self.pattern = pattern
        self.logger = get_logger("loader")

    def discover(self) -> Iterator[Path]:
        """Yield sample paths in a stable order. Every call rescans the tree."""
        if not self.root.is_dir():
            raise MissingDirectoryError(f"Sample directory not found: {self.root}")
        matches = sorted(path for path in self.root.glob(self.pattern) if path.is_file())
        for path in matches:
            relative = path.relative_to(self.root)
            if any(part.startswith(".") for part in relative.parts):
                continue
            yield path

    def load(self, path: Path) -> Sample:
        """Read one sample and its optional sidecar metadata."""
        relative = path.relative_to(self.root).as_posix()
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SampleError(relative, f"cannot read sample: {exc}") from exc

        metadata_path = path.with_suffix(_METADATA_SUFFIX)
        if not metadata_path.is_file():
            self.logger.debug("No metadata for %s; using defaults", relative)
            return Sample(
                path=path,
                relative=relative,
                source=source,
                metadata=Metadata.defaults_for(relative),
            )

        metadata_label = metadata_path.relative_to(self.root).as_posix()
        try:
            data = json.loads(metadata_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise MetadataError(metadata_label, f"invalid JSON: {exc.msg} (line {exc.lineno})") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise MetadataError(metadata_label, f"cannot read metadata: {exc}") from exc

        metadata = Metadata.from_mapping(data, relative=relative, source=metadata_label)
        return Sample(
            path=path,
            relative=relative,
            source=source,
            metadata=metadata,
        )

    def iter_samples(self) -> Iterator[Sample | SampleError]:
        """Yield loaded samples, or the per-sample error that prevented loading."""
        for path in self.discover():
            try:
                yield self.load(path)
            except SampleError as exc:
                yield exc


__all__ = ["DEFAULT_PATTERN", "SampleLoader"]
