"""Exception hierarchy for examplegen runs."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


class ExampleGenError(RuntimeError):
    """Base class for all examplegen failures."""


class RunFatalError(ExampleGenError):
    """Aborts the whole run; no partial output is guaranteed."""


class ConfigError(RunFatalError):
    """Raised when the configuration file cannot be parsed."""


class MissingDirectoryError(RunFatalError):
    """Raised when a configured directory does not exist."""


class OutputCollisionError(RunFatalError):
    """Raised when two compiled documents claim the same output path."""

    def __init__(self, path: str, sources: Sequence[str]) -> None:
        ordered = sorted(sources)
        super().__init__(f"Output path {path} is produced by more than one sample: {', '.join(ordered)}")
        self.path = path
        self.sources = ordered


class SampleError(ExampleGenError):
    """Scoped to a single sample; the run carries on without it."""

    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = str(path)
        self.reason = reason


class MetadataError(SampleError):
    """Raised when a metadata sidecar is malformed."""


class TemplateError(SampleError):
    """Raised when a sample references a template that cannot be resolved."""


class CollaboratorError(ExampleGenError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int, output: str = "") -> None:
        rendered = " ".join(command)
        message = f"Command failed with exit code {returncode}: {rendered}"
        if output.strip():
            message = f"{message}\n{output.rstrip()}"
        super().__init__(message)
        self.command = list(command)
        self.returncode = returncode
        self.output = output


__all__ = [
    "CollaboratorError",
    "ConfigError",
    "ExampleGenError",
    "MetadataError",
    "MissingDirectoryError",
    "OutputCollisionError",
    "RunFatalError",
    "SampleError",
    "TemplateError",
]
