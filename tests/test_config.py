"""Tests for examplegen.config."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from examplegen.config import (
    A4AConfig,
    DeployCommand,
    SiteConfig,
    TemplatesConfig,
    load_config,
)
from examplegen.errors import ConfigError, RunFatalError


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, SiteConfig)
    assert config.root == tmp_path.resolve()
    assert config.host == "https://ampbyexample.com"
    assert config.templates == TemplatesConfig()
    assert config.a4a == A4AConfig()
    assert config.a4a.default_width == 300
    assert config.a4a.default_height == 250
    assert config.a4a.ad_container_label_height == 22
    assert config.src_dir == tmp_path.resolve() / "src"
    assert config.dist_dir == tmp_path.resolve() / "dist"
    assert config.snapshot_dir == tmp_path.resolve() / "tmp"
    assert config.paths.templates_configured is False
    assert [target.name for target in config.deploy] == ["prod", "staging"]


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".examplegen.yml"
    config_file.write_text(
        """
host: "http://localhost:8080/"
site_name: "Examples"
paths:
  src: samples
  dist: public
  templates: layouts
templates:
  index: home.html
  newExample: blank.html
api:
  dist: backend/dist
a4a:
  defaultWidth: 320
  defaultHeight: 50
  adContainerLabelHeight: 18
deploy:
  staging:
    host: "https://staging.example.com"
    robots: disallow
    commands:
      - "goapp deploy -application staging"
      - run: "goapp deploy -application api"
        cwd: api
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.host == "http://localhost:8080"
    assert config.site_name == "Examples"
    assert config.src_dir == tmp_path.resolve() / "samples"
    assert config.dist_dir == tmp_path.resolve() / "public"
    assert config.templates_dir == tmp_path.resolve() / "layouts"
    assert config.paths.templates_configured is True
    assert config.templates.index == "home.html"
    assert config.templates.new_example == "blank.html"
    assert config.templates.example == "example.html"
    assert config.api_dist_dir == tmp_path.resolve() / "backend" / "dist"
    assert config.a4a == A4AConfig(default_width=320, default_height=50, ad_container_label_height=18)

    staging = config.deploy_target("staging")
    assert staging.host == "https://staging.example.com"
    assert staging.robots == "disallow"
    assert staging.commands == (
        DeployCommand(("goapp", "deploy", "-application", "staging")),
        DeployCommand(("goapp", "deploy", "-application", "api"), cwd="api"),
    )
    assert config.deploy_target("prod").robots == "allow"


def test_load_config_rejects_invalid_yaml(tmp_path: Path) -> None:
    (tmp_path / ".examplegen.yml").write_text("host: [unterminated\n", encoding="utf-8")

    with pytest.raises(ConfigError) as excinfo:
        load_config(tmp_path)

    assert isinstance(excinfo.value, RunFatalError)


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".examplegen.yml").write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_non_positive_ad_defaults(tmp_path: Path) -> None:
    (tmp_path / ".examplegen.yml").write_text("a4a:\n  defaultWidth: 0\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="defaultWidth"):
        load_config(tmp_path)


def test_site_config_is_immutable_and_with_host_copies(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    with pytest.raises(FrozenInstanceError):
        config.host = "https://elsewhere.example"  # type: ignore[misc]

    staging = config.with_host("https://staging.example.com/")
    assert staging.host == "https://staging.example.com"
    assert config.host == "https://ampbyexample.com"


def test_unknown_deploy_target_is_a_config_error(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    with pytest.raises(ConfigError, match="qa"):
        config.deploy_target("qa")


def test_templates_for_role() -> None:
    templates = TemplatesConfig()
    assert templates.for_role("new-example") == "new-example.html"
    assert templates.for_role("preview") == "preview.html"
    assert templates.for_role("custom.html") is None
