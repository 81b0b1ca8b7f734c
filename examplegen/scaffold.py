"""Scaffolding of new example samples."""

from __future__ import annotations

import json
from pathlib import Path, PurePosixPath

from .compiler import ExampleCompiler
from .config import SiteConfig
from .logging import get_logger
from .paths import FileName, humanize


class ExampleScaffolder:
    """Creates a sample and its metadata sidecar from the new-example template."""

    def __init__(self, config: SiteConfig, compiler: ExampleCompiler | None = None) -> None:
        self.config = config
        self.compiler = compiler or ExampleCompiler(config)
        self.logger = get_logger("scaffold")

    def create(
        self,
        title: str | None,
        *,
        category: str | None = None,
        directory: str | None = None,
    ) -> Path:
        """Write ``src/<category>/<name>.html`` and return its path.

        ``directory`` adds the example to an existing category directory and
        takes precedence over ``category``.
        """
        file_name = FileName.from_string(title)
        if not title or not file_name:
            raise ValueError("example name missing")
        if directory:
            folder = Path(directory).name
            relative = str(PurePosixPath(folder) / file_name)
            category_name = humanize(folder)
        elif category:
            relative = FileName.from_string(category, title) or file_name
            category_name = category.strip()
        else:
            raise ValueError("example category or directory missing")

        target = self.config.src_dir / relative
        if target.exists():
            raise FileExistsError(f"Example already exists at {target}")

        html = self.compiler.render_new_example(relative, title=title.strip(), category=category_name)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(html, encoding="utf-8")
        metadata = {"title": title.strip(), "category": category_name}
        target.with_suffix(".json").write_text(json.dumps(metadata, indent=2) + "\n", encoding="utf-8")
        self.logger.info("Created example %s", relative)
        return target


__all__ = ["ExampleScaffolder"]
