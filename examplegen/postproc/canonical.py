"""Canonical link injection."""

from __future__ import annotations

import html
import re

_CANONICAL_PATTERN = re.compile(r"<link\b[^>]*\brel\s*=\s*[\"']?canonical\b", re.IGNORECASE)
_CHARSET_PATTERN = re.compile(r"<meta\s+charset\s*=\s*[\"']?utf-8[\"']?\s*/?>", re.IGNORECASE)
_HEAD_CLOSE_PATTERN = re.compile(r"</head\s*>", re.IGNORECASE)


def has_canonical(markup: str) -> bool:
    return _CANONICAL_PATTERN.search(markup) is not None


def inject_canonical(markup: str, url: str) -> str:
    """Add a canonical link unless the document already declares one.

    The link goes right after ``<meta charset="utf-8">``, or before ``</head>``
    when the charset declaration is missing. Documents without either are
    returned unchanged.
    """
    if has_canonical(markup):
        return markup
    link = f'<link rel="canonical" href="{html.escape(url, quote=True)}">'

    charset = _CHARSET_PATTERN.search(markup)
    if charset is not None:
        return f"{markup[: charset.end()]}\n  {link}{markup[charset.end():]}"

    head_close = _HEAD_CLOSE_PATTERN.search(markup)
    if head_close is not None:
        return f"{markup[: head_close.start()]}  {link}\n{markup[head_close.start():]}"
    return markup


__all__ = ["has_canonical", "inject_canonical"]
