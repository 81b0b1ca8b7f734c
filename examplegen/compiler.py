"""Renders samples into finished example pages."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, TemplateError as JinjaTemplateError, TemplateNotFound

from .config import SiteConfig
from .errors import TemplateError
from .logging import get_logger
from .models import CompiledDocument, Sample
from .paths import ExampleFile
from .postproc.canonical import inject_canonical
from .postproc.markup import split_markup

INDEX_PATH = "index.html"
DEFAULT_TEMPLATES_DIR = Path(__file__).with_name("templates")


@dataclass(frozen=True)
class AdSlot:
    """Dimensions substituted into ad-related examples."""

    width: int
    height: int
    label_height: int

    @property
    def container_height(self) -> int:
        return self.height + self.label_height


@dataclass(frozen=True)
class IndexEntry:
    title: str
    url: str
    description: str


@dataclass(frozen=True)
class IndexCategory:
    name: str
    examples: Sequence[IndexEntry]


class ExampleCompiler:
    """Merges samples with templates and site configuration."""

    def __init__(self, config: SiteConfig, *, environment: Environment | None = None) -> None:
        self.config = config
        self._env = environment or create_environment(config)
        self.logger = get_logger("compiler")

    def compile(self, sample: Sample) -> List[CompiledDocument]:
        """Return the example page and, when requested, its preview page."""
        example_file = sample.example_file
        template_name = self.resolve_template(sample)
        context = self._build_context(sample, example_file)

        html = self._render(template_name, context, sample.relative)
        documents = [
            CompiledDocument(
                path=example_file.path,
                html=inject_canonical(html, context["canonical"]),
                role="example",
                sample=sample.relative,
            )
        ]

        if sample.metadata.preview:
            preview_file = example_file.preview()
            preview_template = (
                self.config.a4a.template if sample.metadata.is_ad else self.config.templates.preview
            )
            preview_context = dict(context, url=preview_file.url(), example_url=example_file.url())
            preview_html = self._render(preview_template, preview_context, sample.relative)
            documents.append(
                CompiledDocument(
                    path=preview_file.path,
                    html=inject_canonical(preview_html, context["canonical"]),
                    role="preview",
                    sample=sample.relative,
                )
            )

        self.logger.debug("Compiled %s into %d document(s)", sample.relative, len(documents))
        return documents

    def compile_index(self, samples: Iterable[Sample]) -> CompiledDocument:
        """Render the site index listing every example grouped by category."""
        grouped: Dict[str, List[IndexEntry]] = defaultdict(list)
        for sample in samples:
            grouped[sample.metadata.category].append(
                IndexEntry(
                    title=sample.metadata.title,
                    url=sample.example_file.url(),
                    description=sample.metadata.description,
                )
            )
        categories = [
            IndexCategory(name=name, examples=sorted(entries, key=lambda entry: entry.title.lower()))
            for name, entries in sorted(grouped.items(), key=lambda item: item[0].lower())
        ]
        canonical = self.config.host.rstrip("/") + "/"
        context = dict(self._site_context(), canonical=canonical, url="/", categories=categories)
        html = self._render(self.config.templates.index, context, INDEX_PATH)
        return CompiledDocument(path=INDEX_PATH, html=inject_canonical(html, canonical), role="index")

    def render_new_example(self, relative: str, *, title: str, category: str) -> str:
        """Render the skeleton written for a freshly created example."""
        example_file = ExampleFile.from_path(relative)
        context = dict(
            self._site_context(),
            title=title,
            category=category,
            url=example_file.url(),
            canonical=example_file.canonical_url(self.config.host),
        )
        return self._render(self.config.templates.new_example, context, relative)

    def resolve_template(self, sample: Sample) -> str:
        override = sample.metadata.template
        if not override:
            return self.config.templates.example
        return self.config.templates.for_role(override) or override

    def ad_slot(self, sample: Sample) -> Optional[AdSlot]:
        if not sample.metadata.is_ad:
            return None
        defaults = self.config.a4a
        metadata = sample.metadata
        return AdSlot(
            width=metadata.width or defaults.default_width,
            height=metadata.height or defaults.default_height,
            label_height=metadata.label_height or defaults.ad_container_label_height,
        )

    # ------------------------------------------------------------------
    # Helpers

    def _site_context(self) -> Dict[str, Any]:
        return {
            "site_name": self.config.site_name,
            "host": self.config.host,
        }

    def _build_context(self, sample: Sample, example_file: ExampleFile) -> Dict[str, Any]:
        markup = split_markup(sample.source)
        context = self._site_context()
        context.update(sample.metadata.as_context())
        context.update(
            url=example_file.url(),
            canonical=markup.canonical or example_file.canonical_url(self.config.host),
            head=markup.head,
            body=markup.body,
            body_attributes=markup.body_attributes,
            source=sample.source,
            sample_path=sample.relative,
            ad=self.ad_slot(sample),
        )
        if sample.metadata.preview:
            context["preview_url"] = example_file.preview().url()
        return context

    def _render(self, template_name: str, context: Dict[str, Any], label: str) -> str:
        try:
            template = self._env.get_template(template_name)
        except TemplateNotFound as exc:
            raise TemplateError(label, f"template '{template_name}' not found") from exc
        except JinjaTemplateError as exc:
            raise TemplateError(label, f"template '{template_name}' is invalid: {exc}") from exc
        try:
            rendered = template.render(**context)
        except JinjaTemplateError as exc:
            raise TemplateError(label, f"failed to render '{template_name}': {exc}") from exc
        return rendered if rendered.endswith("\n") else rendered + "\n"


def create_environment(config: SiteConfig) -> Environment:
    """Build a jinja2 environment searching project templates before the packaged ones."""
    directories: List[str] = []
    if config.templates_dir.is_dir():
        directories.append(str(config.templates_dir))
    directories.append(str(DEFAULT_TEMPLATES_DIR))
    loader = FileSystemLoader(directories)
    return Environment(loader=loader, autoescape=False, trim_blocks=True, lstrip_blocks=True)


__all__ = ["AdSlot", "ExampleCompiler", "INDEX_PATH", "create_environment"]
