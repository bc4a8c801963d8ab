"""Subprocess execution for the Helm CLI."""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path

from .types import CommandResult


class CommandRunner:
    """Runs a command to completion and captures its output as text.

    A non-zero exit is reported through ``CommandResult.success``; callers
    decide whether it is an error.
    """

    def __init__(self, cwd: Path | None = None) -> None:
        self.cwd = cwd

    def run(self, cmd: Sequence[str], *, cwd: Path | None = None) -> CommandResult:
        completed = subprocess.run(
            list(cmd),
            cwd=cwd or self.cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        return CommandResult(
            success=completed.returncode == 0,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            returncode=completed.returncode,
        )
