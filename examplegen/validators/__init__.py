"""Structural validation of compiled documents."""

from .amp import AmpBoilerplateValidator, AmpDocumentParser, DisallowedMarkupValidator, default_validators
from .base import ValidationError, ValidationIssue, Validator, validate_document

__all__ = [
    "AmpBoilerplateValidator",
    "AmpDocumentParser",
    "DisallowedMarkupValidator",
    "ValidationError",
    "ValidationIssue",
    "Validator",
    "default_validators",
    "validate_document",
]
