"""Core validation data structures and helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Protocol, Sequence

from ..models import CompiledDocument


@dataclass
class ValidationIssue:
    """Represents a single structural violation in a compiled document."""

    document: str
    rule: str
    detail: str

    def __str__(self) -> str:
        return f"{self.document}: [{self.rule}] {self.detail}"


class ValidationError(RuntimeError):
    """Raised when one or more samples failed a check during a run."""

    def __init__(self, message: str, issues: Sequence[object]) -> None:
        super().__init__(message)
        self.issues = list(issues)


class Validator(Protocol):
    """Protocol implemented by compiled document validators."""

    name: str

    def validate(self, document: CompiledDocument) -> List[ValidationIssue]:
        """Run validation and return any issues."""


def validate_document(
    document: CompiledDocument, validators: Iterable[Validator]
) -> List[ValidationIssue]:
    """Run every validator against ``document``; an empty list means it passed."""
    issues: List[ValidationIssue] = []
    for validator in validators:
        issues.extend(validator.validate(document))
    return issues


__all__ = ["ValidationError", "ValidationIssue", "Validator", "validate_document"]
