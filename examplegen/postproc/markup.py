"""Splits sample markup into the pieces templates consume."""

from __future__ import annotations

import html
import re
from dataclasses import dataclass
from typing import Optional

_FLAGS = re.IGNORECASE | re.DOTALL
_HEAD_PATTERN = re.compile(r"<head\b[^>]*>(.*?)</head\s*>", _FLAGS)
_BODY_PATTERN = re.compile(r"<body\b([^>]*)>(.*?)</body\s*>", _FLAGS)
_CANONICAL_PATTERN = re.compile(r"<link\b[^>]*\brel\s*=\s*[\"']?canonical\b[^>]*>", _FLAGS)
_HREF_PATTERN = re.compile(r"\bhref\s*=\s*(?:\"([^\"]*)\"|'([^']*)'|([^\s>]+))", _FLAGS)

# Head elements every template provides on its own.
_MANAGED_HEAD_PATTERNS = (
    re.compile(r"<meta\s+charset\b[^>]*>", _FLAGS),
    re.compile(r"<meta\s+name\s*=\s*[\"']?viewport\b[^>]*>", _FLAGS),
    re.compile(r"<title\b[^>]*>.*?</title\s*>", _FLAGS),
    _CANONICAL_PATTERN,
    re.compile(
        r"<script\b[^>]*\bsrc\s*=\s*[\"']?https://cdn\.ampproject\.org/v0\.js[\"']?[^>]*>\s*</script\s*>",
        _FLAGS,
    ),
    re.compile(r"<noscript\b[^>]*>\s*<style\b[^>]*\bamp-boilerplate\b.*?</noscript\s*>", _FLAGS),
    re.compile(r"<style\b[^>]*\bamp-boilerplate\b[^>]*>.*?</style\s*>", _FLAGS),
)


@dataclass(frozen=True)
class SampleMarkup:
    """The parts of a sample document that end up in a compiled page.

    ``canonical`` is the href of the sample's own canonical link, if it has one.
    Templates render it in place of the URL derived from the site host.
    """

    head: str
    body: str
    body_attributes: str
    canonical: Optional[str] = None


def split_markup(source: str) -> SampleMarkup:
    """Extract head extras, body and declared canonical URL from a sample.

    Fragments without ``<head>``/``<body>`` are treated as body content.
    """
    head_match = _HEAD_PATTERN.search(source)
    head = head_match.group(1) if head_match else ""
    canonical = _canonical_href(head)
    for pattern in _MANAGED_HEAD_PATTERNS:
        head = pattern.sub("", head)
    head_lines = [line.strip() for line in head.splitlines() if line.strip()]

    body_match = _BODY_PATTERN.search(source)
    if body_match:
        body_attributes = body_match.group(1).strip()
        body = body_match.group(2).strip("\n")
    elif head_match:
        body_attributes = ""
        body = ""
    else:
        body_attributes = ""
        body = source.strip("\n")

    return SampleMarkup(
        head="\n".join(head_lines),
        body=body,
        body_attributes=body_attributes,
        canonical=canonical,
    )


def _canonical_href(head: str) -> Optional[str]:
    link = _CANONICAL_PATTERN.search(head)
    if link is None:
        return None
    href = _HREF_PATTERN.search(link.group(0))
    if href is None:
        return None
    value = next(group for group in href.groups() if group is not None).strip()
    return html.unescape(value) or None


__all__ = ["SampleMarkup", "split_markup"]
