"""Configuration loading for examplegen (.examplegen.yml)."""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".examplegen.yml"
DEFAULT_HOST = "https://ampbyexample.com"


@dataclass(frozen=True)
class PathsConfig:
    """Project-relative locations of the input and output trees."""

    src: str = "src"
    dist: str = "dist"
    templates: str = "templates"
    snapshot: str = "tmp"
    templates_configured: bool = False


@dataclass(frozen=True)
class TemplatesConfig:
    """Template file name per role."""

    index: str = "index.html"
    example: str = "example.html"
    new_example: str = "new-example.html"
    preview: str = "preview.html"

    def for_role(self, role: str) -> Optional[str]:
        roles = {
            "index": self.index,
            "example": self.example,
            "new-example": self.new_example,
            "preview": self.preview,
        }
        return roles.get(role)


@dataclass(frozen=True)
class ApiConfig:
    """Backend API build output removed by clean."""

    dist: str = "api/dist"


@dataclass(frozen=True)
class A4AConfig:
    """Defaults for ad-related examples."""

    template: str = "preview-a4a.html"
    default_width: int = 300
    default_height: int = 250
    ad_container_label_height: int = 22


@dataclass(frozen=True)
class AssetRule:
    """Copies files matching ``patterns`` into ``dest`` unchanged."""

    name: str
    patterns: Tuple[str, ...]
    dest: str
    suffix: Optional[str] = None


@dataclass(frozen=True)
class DeployCommand:
    """A single external command of a deploy sequence."""

    args: Tuple[str, ...]
    cwd: Optional[str] = None


@dataclass(frozen=True)
class DeployTarget:
    """Hosting target with its robots policy and deploy commands."""

    name: str
    host: Optional[str] = None
    robots: str = "allow"
    commands: Tuple[DeployCommand, ...] = ()


DEFAULT_ASSETS: Tuple[AssetRule, ...] = (
    AssetRule("images", ("src/img/*.png", "src/img/*.jpg", "src/img/*.gif"), "dist/img"),
    AssetRule("videos", ("src/video/*.mp4", "src/video/*.webm"), "dist/video"),
    AssetRule("json", ("src/json/*.json",), "dist/json"),
    AssetRule("fonts", ("src/fonts/*.ttf",), "dist/fonts"),
    AssetRule("scripts", ("src/scripts/*.js",), "dist/scripts"),
    AssetRule("license", ("LICENSE",), "dist", suffix=".txt"),
    AssetRule("static", ("static/*.*",), "dist"),
)

DEFAULT_DEPLOY_TARGETS: Tuple[DeployTarget, ...] = (
    DeployTarget(
        name="prod",
        robots="allow",
        commands=(
            DeployCommand(("goapp", "deploy", "-application", "amp-by-example", "-version", "1")),
            DeployCommand(
                ("goapp", "deploy", "-application", "amp-by-example-api", "-version", "1"),
                cwd="api",
            ),
        ),
    ),
    DeployTarget(
        name="staging",
        host="https://amp-by-example-staging.appspot.com",
        robots="disallow",
        commands=(
            DeployCommand(("goapp", "deploy", "-application", "amp-by-example-staging", "-version", "1")),
        ),
    ),
)


@dataclass(frozen=True)
class SiteConfig:
    """Immutable settings for a single examplegen run."""

    root: Path
    host: str = DEFAULT_HOST
    site_name: str = "AMP by Example"
    paths: PathsConfig = field(default_factory=PathsConfig)
    templates: TemplatesConfig = field(default_factory=TemplatesConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    a4a: A4AConfig = field(default_factory=A4AConfig)
    assets: Tuple[AssetRule, ...] = DEFAULT_ASSETS
    deploy: Tuple[DeployTarget, ...] = DEFAULT_DEPLOY_TARGETS

    @property
    def src_dir(self) -> Path:
        return self.root / self.paths.src

    @property
    def dist_dir(self) -> Path:
        return self.root / self.paths.dist

    @property
    def templates_dir(self) -> Path:
        return self.root / self.paths.templates

    @property
    def snapshot_dir(self) -> Path:
        return self.root / self.paths.snapshot

    @property
    def api_dist_dir(self) -> Path:
        return self.root / self.api.dist

    def with_host(self, host: str) -> "SiteConfig":
        """Return a copy of the configuration pointing at another host."""
        return replace(self, host=host.rstrip("/"))

    def deploy_target(self, name: str) -> DeployTarget:
        for target in self.deploy:
            if target.name == name:
                return target
        known = ", ".join(target.name for target in self.deploy) or "none"
        raise ConfigError(f"Unknown deploy target '{name}' (configured: {known})")


def load_config(config_path: Path) -> SiteConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return SiteConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    host = (_as_str(data.get("host")) or DEFAULT_HOST).rstrip("/")
    site_name = _as_str(data.get("site_name")) or SiteConfig.site_name

    paths_data = _as_dict(data.get("paths"))
    paths = PathsConfig(
        src=_as_str(paths_data.get("src")) or PathsConfig.src,
        dist=_as_str(paths_data.get("dist")) or PathsConfig.dist,
        templates=_as_str(paths_data.get("templates")) or PathsConfig.templates,
        snapshot=_as_str(paths_data.get("snapshot")) or PathsConfig.snapshot,
        templates_configured=_as_str(paths_data.get("templates")) is not None,
    )

    templates_data = _as_dict(data.get("templates"))
    templates = TemplatesConfig(
        index=_as_str(templates_data.get("index")) or TemplatesConfig.index,
        example=_as_str(templates_data.get("example")) or TemplatesConfig.example,
        new_example=_as_str(templates_data.get("newExample")) or TemplatesConfig.new_example,
        preview=_as_str(templates_data.get("preview")) or TemplatesConfig.preview,
    )

    api_data = _as_dict(data.get("api"))
    api = ApiConfig(
        dist=_as_str(api_data.get("dist")) or ApiConfig.dist,
    )

    a4a_data = _as_dict(data.get("a4a"))
    a4a = A4AConfig(
        template=_as_str(a4a_data.get("template")) or A4AConfig.template,
        default_width=_positive_int(a4a_data, "defaultWidth", A4AConfig.default_width),
        default_height=_positive_int(a4a_data, "defaultHeight", A4AConfig.default_height),
        ad_container_label_height=_positive_int(
            a4a_data, "adContainerLabelHeight", A4AConfig.ad_container_label_height
        ),
    )

    return SiteConfig(
        root=root,
        host=host,
        site_name=site_name,
        paths=paths,
        templates=templates,
        api=api,
        a4a=a4a,
        assets=_parse_assets(data.get("assets")),
        deploy=_parse_deploy(data.get("deploy")),
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.suffix not in {".yml", ".yaml"}:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _parse_assets(value: Any) -> Tuple[AssetRule, ...]:
    overrides = _as_dict(value)
    if not overrides:
        return DEFAULT_ASSETS
    rules: Dict[str, AssetRule] = {rule.name: rule for rule in DEFAULT_ASSETS}
    for name, raw in overrides.items():
        if raw is None or raw is False:
            rules.pop(str(name), None)
            continue
        entry = _as_dict(raw)
        patterns = _as_str_list(entry.get("patterns"))
        dest = _as_str(entry.get("dest"))
        if not patterns or not dest:
            raise ConfigError(f"Asset rule '{name}' needs 'patterns' and 'dest'")
        rules[str(name)] = AssetRule(
            name=str(name),
            patterns=tuple(patterns),
            dest=dest,
            suffix=_as_str(entry.get("suffix")),
        )
    return tuple(rules.values())


def _parse_deploy(value: Any) -> Tuple[DeployTarget, ...]:
    overrides = _as_dict(value)
    if not overrides:
        return DEFAULT_DEPLOY_TARGETS
    targets: Dict[str, DeployTarget] = {target.name: target for target in DEFAULT_DEPLOY_TARGETS}
    for name, raw in overrides.items():
        entry = _as_dict(raw)
        robots = (_as_str(entry.get("robots")) or "allow").lower()
        if robots not in {"allow", "disallow"}:
            raise ConfigError(f"Deploy target '{name}' has invalid robots policy '{robots}'")
        host = _as_str(entry.get("host"))
        targets[str(name)] = DeployTarget(
            name=str(name),
            host=host.rstrip("/") if host else None,
            robots=robots,
            commands=tuple(_parse_command(name, item) for item in _as_list(entry.get("commands"))),
        )
    return tuple(targets.values())


def _parse_command(target: str, value: Any) -> DeployCommand:
    if isinstance(value, str):
        args = shlex.split(value)
        cwd = None
    elif isinstance(value, Mapping):
        run = value.get("run")
        if isinstance(run, str):
            args = shlex.split(run)
        else:
            args = _as_str_list(run)
        cwd = _as_str(value.get("cwd"))
    else:
        args = _as_str_list(value)
        cwd = None
    if not args:
        raise ConfigError(f"Deploy target '{target}' contains an empty command")
    return DeployCommand(args=tuple(args), cwd=cwd)


def _positive_int(data: Mapping[str, Any], key: str, default: int) -> int:
    if key not in data:
        return default
    value = _as_int(data.get(key))
    if value is None or value <= 0:
        raise ConfigError(f"a4a.{key} must be a positive integer")
    return value


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "A4AConfig",
    "ApiConfig",
    "AssetRule",
    "CONFIG_FILENAME",
    "DeployCommand",
    "DeployTarget",
    "PathsConfig",
    "SiteConfig",
    "TemplatesConfig",
    "load_config",
]
