"""Blocking external command execution for build tools."""

from __future__ import annotations

import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

OUTPUT_TAIL_CHARS = 4_000


@dataclass(slots=True, frozen=True)
class CommandResult:
    """Exit code and captured output of one external command."""

    returncode: int
    stdout: str
    stderr: str

    def tail(self) -> str:
        """Return the last part of combined output for diagnostics."""
        combined = "\n".join(part for part in (self.stdout.strip(), self.stderr.strip()) if part)
        return combined[-OUTPUT_TAIL_CHARS:]


CommandRunner = Callable[[Sequence[str], Path], CommandResult]


def subprocess_runner(command: Sequence[str], cwd: Path) -> CommandResult:
    """Run command to completion in cwd, capturing output."""
    try:
        completed = subprocess.run(
            list(command),
            cwd=cwd,
            check=False,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError as error:
        return CommandResult(returncode=127, stdout="", stderr=str(error))
    return CommandResult(
        returncode=completed.returncode,
        stdout=completed.stdout,
        stderr=completed.stderr,
    )
