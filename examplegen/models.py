"""Core data models shared across examplegen components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import MetadataError
from .paths import ExampleFile, FileName, humanize

SITE_INDEX_LABEL = "<site index>"

_ALLOWED_KEYS = {
    "title",
    "category",
    "description",
    "tags",
    "template",
    "preview",
    "ad",
    "width",
    "height",
    "labelHeight",
}


@dataclass(frozen=True)
class Metadata:
    """Validated content of a sample's ``.json`` sidecar.

    Every field is optional in the sidecar. ``title`` and ``category`` fall back
    to values derived from the sample path, ``ad`` falls back to whether the
    category normalizes to ``ads`` and the ad dimensions fall back to the
    configured a4a defaults at compile time.
    """

    title: str
    category: str
    description: str = ""
    tags: Tuple[str, ...] = ()
    template: Optional[str] = None
    preview: bool = False
    ad: Optional[bool] = None
    width: Optional[int] = None
    height: Optional[int] = None
    label_height: Optional[int] = None

    @property
    def is_ad(self) -> bool:
        if self.ad is not None:
            return self.ad
        return FileName.normalize(self.category) == "ads"

    @classmethod
    def defaults_for(cls, relative: str) -> "Metadata":
        path = PurePosixPath(relative)
        parent = path.parent.name if str(path.parent) != "." else ""
        return cls(title=humanize(path.stem), category=humanize(parent))

    @classmethod
    def from_mapping(cls, data: Any, *, relative: str, source: Path | str) -> "Metadata":
        """Validate a decoded sidecar document and merge it over the path defaults."""
        if not isinstance(data, Mapping):
            raise MetadataError(source, "metadata must be a JSON object")
        unknown = sorted(set(data) - _ALLOWED_KEYS)
        if unknown:
            raise MetadataError(source, f"unknown metadata keys: {', '.join(unknown)}")

        defaults = cls.defaults_for(relative)
        return cls(
            title=_optional_str(data, "title", source) or defaults.title,
            category=_optional_str(data, "category", source) or defaults.category,
            description=_optional_str(data, "description", source) or "",
            tags=tuple(_str_list(data, "tags", source)),
            template=_optional_str(data, "template", source),
            preview=bool(_optional_bool(data, "preview", source)),
            ad=_optional_bool(data, "ad", source),
            width=_optional_dimension(data, "width", source),
            height=_optional_dimension(data, "height", source),
            label_height=_optional_dimension(data, "labelHeight", source),
        )

    def as_context(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "category": self.category,
            "description": self.description,
            "tags": list(self.tags),
            "preview": self.preview,
            "is_ad": self.is_ad,
        }


@dataclass(frozen=True)
class Sample:
    """One source document plus its metadata."""

    path: Path
    relative: str
    source: str
    metadata: Metadata

    @property
    def example_file(self) -> ExampleFile:
        return ExampleFile.from_path(self.relative)


@dataclass(frozen=True)
class CompiledDocument:
    """Rendered HTML and the output path it belongs at."""

    path: str
    html: str
    role: str
    sample: Optional[str] = None

    @property
    def label(self) -> str:
        if self.sample:
            return self.sample
        return SITE_INDEX_LABEL if self.role == "index" else self.path


@dataclass
class SampleFailure:
    """A per-sample problem collected during a run."""

    sample: str
    stage: str
    reason: str
    details: List[str] = field(default_factory=list)


def _optional_str(data: Mapping[str, Any], key: str, source: Path | str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise MetadataError(source, f"'{key}' must be a string")
    return value.strip() or None


def _optional_bool(data: Mapping[str, Any], key: str, source: Path | str) -> Optional[bool]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise MetadataError(source, f"'{key}' must be true or false")
    return value


def _optional_dimension(data: Mapping[str, Any], key: str, source: Path | str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise MetadataError(source, f"'{key}' must be a positive integer")
    return value


def _str_list(data: Mapping[str, Any], key: str, source: Path | str) -> List[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise MetadataError(source, f"'{key}' must be a list of strings")
    return [item.strip() for item in value if item.strip()]
