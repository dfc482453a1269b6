"""Subprocess execution for build tools."""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from rbuild.errors import BuildStepError


@dataclass(frozen=True, slots=True)
class CommandOutput:
    stdout: str
    stderr: str


def run_command(
    argv: Sequence[str | Path],
    *,
    detail: str,
    cwd: str | Path | None = None,
) -> CommandOutput:
    """Run *argv* to completion and return its captured output.

    A non-zero exit, or a tool that cannot be started, raises
    :class:`BuildStepError` carrying *detail* and the captured output.
    """
    command = [str(arg) for arg in argv]
    try:
        completed = subprocess.run(
            command,
            cwd=cwd,
            check=False,
            text=True,
            capture_output=True,
        )
    except OSError as exc:
        raise BuildStepError(
            detail,
            stderr=f"IOError: {exc}",
            hint=f"Ensure `{command[0]}` is installed and in PATH.",
            context={"argv": " ".join(command)},
        ) from exc
    stdout = completed.stdout or ""
    stderr = completed.stderr or ""
    if completed.returncode != 0:
        raise BuildStepError(
            detail,
            stdout=stdout,
            stderr=stderr,
            context={"argv": " ".join(command), "returncode": str(completed.returncode)},
        )
    return CommandOutput(stdout=stdout, stderr=stderr)
