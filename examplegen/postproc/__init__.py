"""Post-processing helpers for compiled documents."""

from .canonical import has_canonical, inject_canonical
from .markup import SampleMarkup, split_markup

__all__ = ["SampleMarkup", "has_canonical", "inject_canonical", "split_markup"]
