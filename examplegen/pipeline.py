"""Pipeline orchestration for compile/validate/snapshot/build/deploy flows."""

from __future__ import annotations

import shutil
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .commands import CommandResult, CommandRunner
from .compiler import ExampleCompiler
from .config import SiteConfig, load_config
from .errors import MissingDirectoryError, OutputCollisionError, SampleError
from .loader import SampleLoader
from .logging import get_logger
from .models import CompiledDocument, Sample, SampleFailure
from .paths import ExampleFile
from .postproc import has_canonical, inject_canonical
from .scaffold import ExampleScaffolder
from .site import AssetCopier, CopyReport, SitemapBuilder, write_robots
from .stores import SnapshotStore
from .validators import ValidationError, Validator, default_validators, validate_document


@dataclass
class CompileRun:
    """Documents produced by one compilation pass plus the samples that failed."""

    samples: List[Sample] = field(default_factory=list)
    documents: List[CompiledDocument] = field(default_factory=list)
    failures: List[SampleFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass
class CheckReport:
    """Outcome of validating or snapshot-verifying a compile run."""

    checked: int = 0
    failures: List[SampleFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class Pipeline:
    """Coordinates the example pipeline and its collaborators for one project."""

    def __init__(
        self,
        config: SiteConfig,
        *,
        loader: SampleLoader | None = None,
        compiler: ExampleCompiler | None = None,
        validators: Optional[Iterable[Validator]] = None,
        snapshot_store: SnapshotStore | None = None,
        command_runner: CommandRunner | None = None,
    ) -> None:
        self.config = config
        self.loader = loader or SampleLoader(config.src_dir)
        self.compiler = compiler or ExampleCompiler(config)
        self.validators = list(validators) if validators is not None else default_validators()
        self.snapshot_store = snapshot_store or SnapshotStore(config.snapshot_dir)
        self.command_runner = command_runner or CommandRunner()
        self.logger = get_logger("pipeline")

    @classmethod
    def from_path(cls, path: str | Path, **kwargs: object) -> "Pipeline":
        """Build a pipeline for the project containing ``path``."""
        return cls(load_config(Path(path)), **kwargs)  # type: ignore[arg-type]

    # ------------------------------------------------------------------
    # Compilation

    def compile(self, *, include_index: bool = True) -> CompileRun:
        """Load and compile every sample, collecting per-sample failures."""
        self._require_directories()
        run = CompileRun()
        for item in self.loader.iter_samples():
            if isinstance(item, SampleError):
                run.failures.append(SampleFailure(sample=item.path, stage="load", reason=item.reason))
                continue
            try:
                documents = self.compiler.compile(item)
            except SampleError as exc:
                run.failures.append(SampleFailure(sample=exc.path, stage="compile", reason=exc.reason))
                continue
            run.samples.append(item)
            run.documents.extend(documents)

        if include_index:
            run.documents.append(self.compiler.compile_index(run.samples))

        self._check_collisions(run.documents)
        self._report_failures(run.failures)
        self.logger.info(
            "Compiled %d sample(s) into %d document(s); %d failed",
            len(run.samples),
            len(run.documents),
            len(run.failures),
        )
        return run

    def run_compile(self) -> CompileRun:
        """Compile all samples and write the results into the output tree."""
        run = self.compile()
        self.write(run.documents, self.config.dist_dir)
        return run

    def write(self, documents: Iterable[CompiledDocument], dest: Path) -> List[Path]:
        written: List[Path] = []
        for document in documents:
            target = dest / document.path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(document.html, encoding="utf-8")
            written.append(target)
        self.logger.debug("Wrote %d document(s) to %s", len(written), dest)
        return written

    # ------------------------------------------------------------------
    # Checks

    def run_validate(self) -> CheckReport:
        """Compile in memory and validate every document."""
        run = self.compile()
        report = CheckReport(failures=list(run.failures))
        for document in run.documents:
            report.checked += 1
            issues = validate_document(document, self.validators)
            if issues:
                report.failures.append(
                    SampleFailure(
                        sample=document.label,
                        stage="validate",
                        reason=f"{len(issues)} validation issue(s) in {document.path}",
                        details=[str(issue) for issue in issues],
                    )
                )
        self._report_failures(report.failures[len(run.failures):])
        self.logger.info("Validated %d document(s); %d failure(s)", report.checked, len(report.failures))
        return report

    def run_snapshot(self) -> List[Path]:
        """Overwrite the snapshot directory with freshly compiled output."""
        run = self.compile()
        if not run.ok:
            raise ValidationError("Cannot take a snapshot while samples fail to compile", run.failures)
        return self.snapshot_store.take(run.documents)

    def run_snapshot_verify(self) -> CheckReport:
        """Compare freshly compiled output with the stored snapshot."""
        run = self.compile()
        report = CheckReport(failures=list(run.failures))
        for document in run.documents:
            report.checked += 1
            differences = self.snapshot_store.diff(document)
            if differences:
                report.failures.append(
                    SampleFailure(
                        sample=document.label,
                        stage="snapshot",
                        reason=f"{document.path} differs from snapshot",
                        details=differences,
                    )
                )
        self._report_failures(report.failures[len(run.failures):])
        return report

    # ------------------------------------------------------------------
    # Site outputs

    def run_sitemap(self, samples: Iterable[Sample] | None = None) -> Path:
        """Write sitemap.xml for the samples that compile; compiles them when not given."""
        if samples is None:
            samples = self.compile(include_index=False).samples
        builder = SitemapBuilder(self.config.host)
        return builder.write((sample.example_file for sample in samples), self.config.dist_dir)

    def run_assets(self) -> CopyReport:
        return AssetCopier(self.config.root).copy(self.config.assets)

    def run_robots(self, *, allow: bool) -> Path:
        return write_robots(self.config.dist_dir, allow=allow)

    def run_clean(self) -> List[Path]:
        removed: List[Path] = []
        for directory in (self.config.dist_dir, self.config.api_dist_dir):
            if directory.exists():
                shutil.rmtree(directory)
                removed.append(directory)
        self.logger.info("Removed %d generated director(ies)", len(removed))
        return removed

    def run_build(self) -> CompileRun:
        """Copy assets, compile every example and write the sitemap."""
        self.run_assets()
        run = self.run_compile()
        self.run_sitemap(run.samples)
        return run

    def run_canonicalize(self) -> List[Path]:
        """Rewrite source samples in place to declare their canonical link."""
        self._require_directories()
        updated: List[Path] = []
        for path in self.loader.discover():
            source = path.read_text(encoding="utf-8")
            if has_canonical(source):
                continue
            relative = path.relative_to(self.loader.root).as_posix()
            url = ExampleFile.from_path(relative).canonical_url(self.config.host)
            rewritten = inject_canonical(source, url)
            if rewritten == source:
                self.logger.warning("No <head> in %s; canonical link not added", relative)
                continue
            path.write_text(rewritten, encoding="utf-8")
            self.logger.info("Updating canonical: %s", relative)
            updated.append(path)
        return updated

    def run_create(
        self,
        title: str | None,
        *,
        category: str | None = None,
        directory: str | None = None,
    ) -> Path:
        return ExampleScaffolder(self.config, self.compiler).create(
            title, category=category, directory=directory
        )

    def run_deploy(self, target_name: str) -> List[CommandResult]:
        """Clean, build for the target host and run the target's deploy commands."""
        target = self.config.deploy_target(target_name)
        config = self.config.with_host(target.host) if target.host else self.config
        pipeline = self if config is self.config else self._for_config(config)

        pipeline.run_clean()
        pipeline.run_robots(allow=target.robots == "allow")
        run = pipeline.run_build()
        if not run.ok:
            raise ValidationError(f"Build for {target.name} failed; deploy aborted", run.failures)
        self.logger.info("Deploying to %s (%s)", target.name, config.host)
        return pipeline.command_runner.run_sequence(target.commands, root=config.root)

    # ------------------------------------------------------------------
    # Helpers

    def _for_config(self, config: SiteConfig) -> "Pipeline":
        return Pipeline(
            config,
            loader=self.loader,
            validators=self.validators,
            snapshot_store=self.snapshot_store,
            command_runner=self.command_runner,
        )

    def _require_directories(self) -> None:
        if not self.config.src_dir.is_dir():
            raise MissingDirectoryError(f"Sample directory not found: {self.config.src_dir}")
        if self.config.paths.templates_configured and not self.config.templates_dir.is_dir():
            raise MissingDirectoryError(f"Template directory not found: {self.config.templates_dir}")

    @staticmethod
    def _check_collisions(documents: Iterable[CompiledDocument]) -> None:
        owners: Dict[str, List[str]] = defaultdict(list)
        for document in documents:
            owners[document.path].append(document.label)
        for path in sorted(owners):
            if len(owners[path]) > 1:
                raise OutputCollisionError(path, owners[path])

    def _report_failures(self, failures: Iterable[SampleFailure]) -> None:
        for failure in failures:
            self.logger.error("%s: %s", failure.sample, failure.reason)
            for detail in failure.details:
                self.logger.error("  %s", detail)


__all__ = ["CheckReport", "CompileRun", "Pipeline"]
