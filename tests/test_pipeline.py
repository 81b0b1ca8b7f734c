"""Tests for the pipeline orchestration."""

from __future__ import annotations

from pathlib import Path

import pytest

from examplegen.commands import CommandResult, CommandRunner
from examplegen.errors import CollaboratorError, MissingDirectoryError, OutputCollisionError
from examplegen.validators import ValidationError
from tests._fixtures.site_builder import SiteBuilder


def test_run_compile_writes_examples_and_index(site_builder: SiteBuilder) -> None:
    site_builder.sample("ads/basic.html", metadata={"title": "Basic Ad", "category": "ads", "preview": True})
    site_builder.sample("components/carousel.html")
    pipeline = site_builder.pipeline()

    run = pipeline.run_compile()

    dist = site_builder.config().dist_dir
    assert run.ok
    assert [sample.relative for sample in run.samples] == ["ads/basic.html", "components/carousel.html"]
    assert (dist / "ads" / "basic.html").is_file()
    assert (dist / "ads" / "basic" / "preview.html").is_file()
    assert (dist / "components" / "carousel.html").is_file()
    assert "Basic Ad" in (dist / "index.html").read_text(encoding="utf-8")


def test_compile_collects_per_sample_failures_and_continues(site_builder: SiteBuilder) -> None:
    site_builder.sample("ads/basic.html")
    site_builder.sample("ads/broken.html")
    site_builder.write({"src/ads/broken.json": "{oops"})
    site_builder.sample("misc/missing_template.html", metadata={"template": "nope.html"})
    pipeline = site_builder.pipeline()

    run = pipeline.run_compile()

    assert not run.ok
    assert [(failure.sample, failure.stage) for failure in run.failures] == [
        ("ads/broken.json", "load"),
        ("misc/missing_template.html", "compile"),
    ]
    assert (site_builder.config().dist_dir / "ads" / "basic.html").is_file()
    assert not (site_builder.config().dist_dir / "ads" / "broken.html").exists()


def test_colliding_output_paths_abort_the_run(site_builder: SiteBuilder) -> None:
    site_builder.sample("ads/basic-ad.html")
    site_builder.sample("ads/basic_ad.html")
    pipeline = site_builder.pipeline()

    with pytest.raises(OutputCollisionError) as excinfo:
        pipeline.run_compile()

    assert excinfo.value.path == "ads/basic_ad.html"
    assert excinfo.value.sources == ["ads/basic-ad.html", "ads/basic_ad.html"]
    assert not site_builder.config().dist_dir.exists()


def test_missing_source_directory_is_fatal(tmp_path: Path) -> None:
    builder = SiteBuilder(tmp_path)
    (builder.path() / "src").rmdir()

    with pytest.raises(MissingDirectoryError):
        builder.pipeline().compile()


def test_missing_configured_template_directory_is_fatal(site_builder: SiteBuilder) -> None:
    site_builder.write({".examplegen.yml": "paths:\n  templates: layouts\n"})
    site_builder.sample("intro.html")

    with pytest.raises(MissingDirectoryError, match="layouts"):
        site_builder.pipeline().compile()


def test_run_validate_accepts_compiled_examples(site_builder: SiteBuilder) -> None:
    site_builder.sample("ads/basic.html", metadata={"preview": True})
    site_builder.sample("components/carousel.html")

    report = site_builder.pipeline().run_validate()

    assert report.ok
    assert report.checked == 4


def test_run_validate_reports_each_failing_sample(site_builder: SiteBuilder) -> None:
    site_builder.sample("bad/image.html", body='<img src="a.png">')
    site_builder.sample("bad/script.html", body="<script>alert(1)</script>")
    site_builder.sample("good/plain.html")

    report = site_builder.pipeline().run_validate()

    assert not report.ok
    assert report.checked == 4
    assert sorted(failure.sample for failure in report.failures) == ["bad/image.html", "bad/script.html"]
    assert all(failure.stage == "validate" for failure in report.failures)
    assert any("disallowed tag <img>" in detail for detail in report.failures[0].details)


def test_snapshot_round_trip_matches(site_builder: SiteBuilder) -> None:
    site_builder.sample("ads/basic.html", metadata={"preview": True})
    pipeline = site_builder.pipeline()

    written = pipeline.run_snapshot()
    report = pipeline.run_snapshot_verify()

    assert len(written) == 3
    assert report.ok
    assert report.checked == 3


def test_snapshot_verify_detects_changed_output(site_builder: SiteBuilder) -> None:
    sample = site_builder.sample("ads/basic.html")
    pipeline = site_builder.pipeline()
    pipeline.run_snapshot()

    sample.write_text(sample.read_text(encoding="utf-8").replace("<p>Hello</p>", "<p>Changed</p>"), encoding="utf-8")
    report = pipeline.run_snapshot_verify()

    assert [failure.sample for failure in report.failures] == ["ads/basic.html"]
    assert "+<p>Changed</p>" in report.failures[0].details


def test_snapshot_refuses_failing_samples(site_builder: SiteBuilder) -> None:
    site_builder.sample("misc/broken.html", metadata={"template": "nope.html"})

    with pytest.raises(ValidationError):
        site_builder.pipeline().run_snapshot()


def test_run_build_copies_assets_and_writes_sitemap(site_builder: SiteBuilder) -> None:
    site_builder.sample("ads/basic.html")
    site_builder.write({"static/manifest.json": "{}", "LICENSE": "Apache"})
    (site_builder.path() / "src" / "img").mkdir()
    (site_builder.path() / "src" / "img" / "logo.png").write_bytes(b"png")

    run = site_builder.pipeline().run_build()

    dist = site_builder.config().dist_dir
    assert run.ok
    assert (dist / "img" / "logo.png").is_file()
    assert (dist / "manifest.json").is_file()
    assert (dist / "LICENSE.txt").is_file()
    assert "https://ampbyexample.com/ads/basic.html" in (dist / "sitemap.xml").read_text(encoding="utf-8")


def test_run_clean_removes_generated_directories(site_builder: SiteBuilder) -> None:
    site_builder.write({"dist/index.html": "x", "api/dist/app": "y"})

    removed = site_builder.pipeline().run_clean()

    assert len(removed) == 2
    assert not (site_builder.path() / "dist").exists()
    assert not (site_builder.path() / "api" / "dist").exists()


def test_run_deploy_builds_for_target_host_then_runs_commands(site_builder: SiteBuilder) -> None:
    site_builder.sample("ads/basic.html")
    site_builder.write({"dist/stale.html": "old"})
    calls = []

    def runner(args, cwd):
        calls.append((list(args), Path(cwd)))
        return CommandResult(returncode=0)

    pipeline = site_builder.pipeline(command_runner=CommandRunner(runner=runner))
    results = pipeline.run_deploy("staging")

    dist = site_builder.config().dist_dir
    assert len(results) == 1
    assert calls[0][0][:2] == ["goapp", "deploy"]
    assert not (dist / "stale.html").exists()
    assert (dist / "robots.txt").read_text(encoding="utf-8") == "User-Agent: *\nDisallow: /\n"
    html = (dist / "ads" / "basic.html").read_text(encoding="utf-8")
    assert "https://amp-by-example-staging.appspot.com/ads/basic.html" in html


def test_run_deploy_stops_at_failing_command(site_builder: SiteBuilder) -> None:
    site_builder.sample("ads/basic.html")
    calls = []

    def runner(args, cwd):
        calls.append(list(args))
        return CommandResult(returncode=1, output="quota exceeded")

    pipeline = site_builder.pipeline(command_runner=CommandRunner(runner=runner))

    with pytest.raises(CollaboratorError, match="quota exceeded"):
        pipeline.run_deploy("prod")
    assert len(calls) == 1


def test_run_deploy_aborts_when_build_fails(site_builder: SiteBuilder) -> None:
    site_builder.sample("misc/broken.html", metadata={"template": "nope.html"})
    calls = []
    pipeline = site_builder.pipeline(
        command_runner=CommandRunner(runner=lambda args, cwd: calls.append(args) or CommandResult(0))
    )

    with pytest.raises(ValidationError):
        pipeline.run_deploy("prod")
    assert calls == []


def test_index_sample_collides_with_generated_index(site_builder: SiteBuilder) -> None:
    site_builder.sample("index.html")

    with pytest.raises(OutputCollisionError) as excinfo:
        site_builder.pipeline().compile()

    assert excinfo.value.sources == ["<site index>", "index.html"]


def test_sitemap_lists_only_samples_that_compile(site_builder: SiteBuilder) -> None:
    site_builder.sample("ads/basic.html")
    site_builder.sample("misc/broken.html", metadata={"template": "nope.html"})

    run = site_builder.pipeline().run_build()

    dist = site_builder.config().dist_dir
    sitemap = (dist / "sitemap.xml").read_text(encoding="utf-8")
    assert not run.ok
    assert "<loc>https://ampbyexample.com/ads/basic.html</loc>" in sitemap
    assert "misc/broken.html" not in sitemap
    assert not (dist / "misc" / "broken.html").exists()


def test_run_sitemap_compiles_samples_when_none_given(site_builder: SiteBuilder) -> None:
    site_builder.sample("ads/basic.html")
    site_builder.sample("misc/broken.html", metadata={"template": "nope.html"})

    sitemap = site_builder.pipeline().run_sitemap().read_text(encoding="utf-8")

    assert "https://ampbyexample.com/ads/basic.html" in sitemap
    assert "misc/broken.html" not in sitemap


def test_run_canonicalize_rewrites_sources_once(site_builder: SiteBuilder) -> None:
    plain = site_builder.sample("Ads/Basic-Ad.html")
    declared = site_builder.sample("components/carousel.html")
    declared_source = declared.read_text(encoding="utf-8").replace(
        '<meta charset="utf-8">',
        '<meta charset="utf-8">\n  <link rel="canonical" href="https://other.example/carousel.html">',
    )
    declared.write_text(declared_source, encoding="utf-8")
    site_builder.write({"src/misc/fragment.html": "<p>no head</p>\n"})
    pipeline = site_builder.pipeline()

    updated = pipeline.run_canonicalize()

    assert updated == [plain]
    assert (
        '<meta charset="utf-8">\n  <link rel="canonical" href="https://ampbyexample.com/ads/basic_ad.html">'
        in plain.read_text(encoding="utf-8")
    )
    assert declared.read_text(encoding="utf-8") == declared_source
    assert (site_builder.path() / "src" / "misc" / "fragment.html").read_text(encoding="utf-8") == "<p>no head</p>\n"

    rewritten = plain.read_text(encoding="utf-8")
    assert pipeline.run_canonicalize() == []
    assert plain.read_text(encoding="utf-8") == rewritten
