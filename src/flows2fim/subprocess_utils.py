"""Subprocess helpers for running GDAL command line tools."""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

LOGGER = logging.getLogger(__name__)
COMMAND_NOT_RUNNABLE = 127


@dataclass(frozen=True)
class CommandResult:
    """Captured output from a command invocation."""

    command: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def format_command(command: Sequence[str]) -> str:
    """Return a shell-style rendering of a command for logs."""
    return shlex.join(str(item) for item in command)


def run_command(command: Sequence[str], *, cwd: Path | None = None) -> CommandResult:
    """Run a command to completion and capture its output.

    A command that cannot be started at all is reported with return code 127
    and the OS error as stderr, the same as a shell would.
    """
    cmd_list = [str(item) for item in command]
    LOGGER.debug("Running %s", format_command(cmd_list))
    try:
        result = subprocess.run(
            cmd_list,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        return CommandResult(cmd_list, COMMAND_NOT_RUNNABLE, "", str(exc))
    if result.stdout.strip():
        LOGGER.debug("%s stdout: %s", Path(cmd_list[0]).name, result.stdout.strip())
    return CommandResult(cmd_list, result.returncode, result.stdout, result.stderr)
