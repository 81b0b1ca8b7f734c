"""External command execution for deploy sequences."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Sequence

from .config import DeployCommand
from .errors import CollaboratorError
from .logging import get_logger


@dataclass(frozen=True)
class CommandResult:
    """Exit status and combined output of an external command."""

    returncode: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


Runner = Callable[..., CommandResult]


class CommandRunner:
    """Runs external commands; a failing command aborts the enclosing sequence."""

    def __init__(self, runner: Runner | None = None) -> None:
        self._runner = runner or self._default_runner
        self.logger = get_logger("commands")

    def run(self, args: Sequence[str], *, cwd: Path) -> CommandResult:
        """Run a single command and return its status without raising."""
        self.logger.info("$ %s", " ".join(args))
        return self._runner(list(args), cwd=cwd)

    def check(self, args: Sequence[str], *, cwd: Path) -> CommandResult:
        result = self.run(args, cwd=cwd)
        if not result.ok:
            raise CollaboratorError(args, result.returncode, result.output)
        return result

    def run_sequence(self, commands: Iterable[DeployCommand], *, root: Path) -> List[CommandResult]:
        """Run commands in order, stopping at the first non-zero exit."""
        results: List[CommandResult] = []
        for command in commands:
            cwd = root / command.cwd if command.cwd else root
            results.append(self.check(command.args, cwd=cwd))
        return results

    @staticmethod
    def _default_runner(args: Iterable[str], *, cwd: Path) -> CommandResult:
        try:
            completed = subprocess.run(
                list(args),
                cwd=str(cwd),
                check=False,
                text=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except FileNotFoundError as exc:
            return CommandResult(returncode=127, output=str(exc))
        return CommandResult(returncode=completed.returncode, output=completed.stdout or "")


__all__ = ["CommandResult", "CommandRunner"]
