"""File name and URL derivation for examples."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Optional

_UNSAFE_PATTERN = re.compile(r"[^a-z0-9]+")
_ORDER_PREFIX = re.compile(r"^\d+[_\-\s]+")
_HTML_SUFFIX = ".html"


class FileName:
    """Derives URL-safe example file names from human readable titles."""

    @staticmethod
    def normalize(value: str) -> str:
        """Lower-case ``value`` and collapse unsafe characters to ``_``."""
        return _UNSAFE_PATTERN.sub("_", value.strip().lower()).strip("_")

    @classmethod
    def from_string(cls, *parts: Optional[str]) -> Optional[str]:
        """Return ``category/title.html`` (or ``title.html``), ``None`` without a usable title.

        The last part is the title, anything before it becomes a directory.
        """
        if not parts:
            return None
        *directories, title = parts
        stem = cls.normalize(title or "")
        if not stem:
            return None
        segments = [cls.normalize(part) for part in directories if part]
        segments = [segment for segment in segments if segment]
        return "/".join([*segments, stem + _HTML_SUFFIX])

    @classmethod
    def from_relative_path(cls, relative: str) -> str:
        """Normalize every segment of a source path relative to the sample root."""
        path = PurePosixPath(relative)
        stem = cls.normalize(path.stem) or "index"
        segments = [cls.normalize(part) for part in path.parts[:-1]]
        return "/".join([*(segment for segment in segments if segment), stem + _HTML_SUFFIX])


@dataclass(frozen=True)
class ExampleFile:
    """A compiled example identified by its path below the output root."""

    path: str

    @classmethod
    def from_path(cls, relative: str) -> "ExampleFile":
        return cls(path=FileName.from_relative_path(relative))

    def url(self) -> str:
        return "/" + self.path

    def canonical_url(self, host: str) -> str:
        return host.rstrip("/") + self.url()

    def preview(self) -> "ExampleFile":
        target = PurePosixPath(self.path)
        return ExampleFile(path=str(target.with_suffix("") / "preview.html"))

    @property
    def category_dir(self) -> str:
        parent = PurePosixPath(self.path).parent
        return "" if str(parent) == "." else str(parent)


def humanize(segment: str) -> str:
    """Turn a directory or file stem into a display name (``10_Ad_Slots`` -> ``Ad Slots``)."""
    cleaned = _ORDER_PREFIX.sub("", segment)
    return " ".join(re.split(r"[_\-\s]+", cleaned)).strip()


__all__ = ["ExampleFile", "FileName", "humanize"]
