"""Identity copies of static assets into the output tree."""

from __future__ import annotations

import hashlib
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List

from ..config import AssetRule
from ..logging import get_logger


@dataclass
class CopyReport:
    """Files copied and files skipped because the destination was already current."""

    copied: List[Path] = field(default_factory=list)
    unchanged: List[Path] = field(default_factory=list)


class AssetCopier:
    """Copies files matching asset rules, skipping destinations with identical content."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.logger = get_logger("assets")

    def copy(self, rules: Iterable[AssetRule]) -> CopyReport:
        report = CopyReport()
        for rule in rules:
            self._copy_rule(rule, report)
        self.logger.info(
            "Copied %d asset(s), %d already up to date", len(report.copied), len(report.unchanged)
        )
        return report

    def _copy_rule(self, rule: AssetRule, report: CopyReport) -> None:
        dest_dir = self.root / rule.dest
        sources = sorted({path for pattern in rule.patterns for path in self.root.glob(pattern) if path.is_file()})
        for source in sources:
            name = source.stem + rule.suffix if rule.suffix else source.name
            target = dest_dir / name
            if target.is_file() and _digest(target) == _digest(source):
                report.unchanged.append(target)
                continue
            dest_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
            report.copied.append(target)
            self.logger.debug("[%s] %s -> %s", rule.name, source, target)


def _digest(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()


__all__ = ["AssetCopier", "CopyReport"]
