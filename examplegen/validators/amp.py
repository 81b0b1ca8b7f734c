"""AMP structure checks for compiled example pages."""

from __future__ import annotations

from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import Dict, List, Optional, Tuple

from ..models import CompiledDocument
from .base import ValidationIssue, Validator

AMP_RUNTIME = "https://cdn.ampproject.org/v0.js"
AMP_CDN_PREFIX = "https://cdn.ampproject.org/"

_DISALLOWED_TAGS = {
    "applet",
    "audio",
    "embed",
    "frame",
    "frameset",
    "iframe",
    "img",
    "object",
    "param",
    "video",
}
_JSON_SCRIPT_TYPES = {"application/json", "application/ld+json"}
_STYLE_MARKERS = ("amp-custom", "amp-boilerplate", "amp-keyframes")


@dataclass
class ScriptTag:
    attrs: Dict[str, Optional[str]]
    line: int
    has_content: bool = False


@dataclass
class StyleTag:
    attrs: Dict[str, Optional[str]]
    line: int
    in_noscript: bool


@dataclass
class DocumentFacts:
    """Everything the AMP validators need to know about a document."""

    doctype: Optional[str] = None
    html_attrs: Optional[Dict[str, Optional[str]]] = None
    tags: Dict[str, int] = field(default_factory=dict)
    meta: List[Dict[str, Optional[str]]] = field(default_factory=list)
    links: List[Dict[str, Optional[str]]] = field(default_factory=list)
    scripts: List[ScriptTag] = field(default_factory=list)
    styles: List[StyleTag] = field(default_factory=list)
    disallowed: List[Tuple[str, int]] = field(default_factory=list)


class AmpDocumentParser(HTMLParser):
    """Collects the tags and attributes relevant to AMP validation."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.facts = DocumentFacts()
        self._noscript_depth = 0
        self._current_script: Optional[ScriptTag] = None

    @classmethod
    def parse(cls, markup: str) -> DocumentFacts:
        parser = cls()
        parser.feed(markup)
        parser.close()
        return parser.facts

    def handle_decl(self, decl: str) -> None:
        if self.facts.doctype is None:
            self.facts.doctype = " ".join(decl.lower().split())

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        attributes = {name.lower(): value for name, value in attrs}
        line = self.getpos()[0]
        self.facts.tags[tag] = self.facts.tags.get(tag, 0) + 1
        if tag == "html" and self.facts.html_attrs is None:
            self.facts.html_attrs = attributes
        elif tag == "meta":
            self.facts.meta.append(attributes)
        elif tag == "link":
            self.facts.links.append(attributes)
        elif tag == "script":
            self._current_script = ScriptTag(attrs=attributes, line=line)
            self.facts.scripts.append(self._current_script)
        elif tag == "style":
            self.facts.styles.append(
                StyleTag(attrs=attributes, line=line, in_noscript=self._noscript_depth > 0)
            )
        elif tag == "noscript":
            self._noscript_depth += 1
        if tag in _DISALLOWED_TAGS:
            self.facts.disallowed.append((tag, line))

    def handle_startendtag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        self.handle_starttag(tag, attrs)
        if tag == "script":
            self._current_script = None

    def handle_endtag(self, tag: str) -> None:
        if tag == "script":
            self._current_script = None
        elif tag == "noscript" and self._noscript_depth:
            self._noscript_depth -= 1

    def handle_data(self, data: str) -> None:
        if self._current_script is not None and data.strip():
            self._current_script.has_content = True


class AmpBoilerplateValidator:
    """Ensures compiled documents carry the mandatory AMP markup."""

    name = "amp-boilerplate"

    def validate(self, document: CompiledDocument) -> List[ValidationIssue]:
        facts = AmpDocumentParser.parse(document.html)
        missing: List[str] = []

        if facts.doctype != "doctype html":
            missing.append("<!doctype html>")
        attrs = facts.html_attrs or {}
        if "⚡" not in attrs and "amp" not in attrs:
            missing.append("<html ⚡> (or <html amp>)")
        for tag in ("head", "body"):
            if not facts.tags.get(tag):
                missing.append(f"<{tag}>")
        if not any((meta.get("charset") or "").lower() == "utf-8" for meta in facts.meta):
            missing.append('<meta charset="utf-8">')
        if not any((meta.get("name") or "").lower() == "viewport" for meta in facts.meta):
            missing.append('<meta name="viewport">')
        if not any("canonical" in _rel_values(link) and link.get("href") for link in facts.links):
            missing.append('<link rel="canonical">')
        if not any(
            script.attrs.get("src") == AMP_RUNTIME and "async" in script.attrs for script in facts.scripts
        ):
            missing.append(f'<script async src="{AMP_RUNTIME}">')
        boilerplate = [style for style in facts.styles if "amp-boilerplate" in style.attrs]
        if not any(not style.in_noscript for style in boilerplate):
            missing.append("<style amp-boilerplate>")
        if not any(style.in_noscript for style in boilerplate):
            missing.append("<noscript><style amp-boilerplate>")

        return [
            ValidationIssue(document=document.path, rule=self.name, detail=f"missing required {item}")
            for item in missing
        ]


class DisallowedMarkupValidator:
    """Flags tags, scripts and styles that AMP pages may not contain."""

    name = "amp-disallowed"

    def validate(self, document: CompiledDocument) -> List[ValidationIssue]:
        facts = AmpDocumentParser.parse(document.html)
        issues: List[ValidationIssue] = []

        for tag, line in facts.disallowed:
            issues.append(self._issue(document, f"disallowed tag <{tag}> on line {line}"))

        for script in facts.scripts:
            src = script.attrs.get("src")
            if src:
                if not src.startswith(AMP_CDN_PREFIX):
                    issues.append(
                        self._issue(document, f"script from {src} on line {script.line} is not an AMP component")
                    )
                continue
            script_type = (script.attrs.get("type") or "").lower()
            if script_type not in _JSON_SCRIPT_TYPES:
                issues.append(self._issue(document, f"inline script on line {script.line} is not allowed"))

        custom_styles = 0
        for style in facts.styles:
            markers = [marker for marker in _STYLE_MARKERS if marker in style.attrs]
            if not markers:
                issues.append(self._issue(document, f"<style> on line {style.line} lacks an AMP attribute"))
            if "amp-custom" in markers:
                custom_styles += 1
        if custom_styles > 1:
            issues.append(self._issue(document, "only one <style amp-custom> is allowed"))
        return issues

    def _issue(self, document: CompiledDocument, detail: str) -> ValidationIssue:
        return ValidationIssue(document=document.path, rule=self.name, detail=detail)


def default_validators() -> List[Validator]:
    return [AmpBoilerplateValidator(), DisallowedMarkupValidator()]


def _rel_values(link: Dict[str, Optional[str]]) -> List[str]:
    return (link.get("rel") or "").lower().split()


__all__ = [
    "AMP_RUNTIME",
    "AmpBoilerplateValidator",
    "AmpDocumentParser",
    "DisallowedMarkupValidator",
    "default_validators",
]
