"""Subprocess helper shared by the command line based adapters."""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def run_command(
    args: Sequence[str],
    cwd: Path,
    extra_env: Optional[Mapping[str, str]] = None,
) -> CommandResult:
    """Run a VCS client and capture its output.

    Raises FileNotFoundError when the executable is not installed.
    """
    logger.debug(f"Running {' '.join(args)} in {cwd}")
    env = None
    if extra_env:
        env = {**os.environ, **extra_env}
    completed = subprocess.run(
        list(args),
        cwd=str(cwd),
        capture_output=True,
        text=True,
        check=False,
        env=env,
    )
    if completed.returncode != 0:
        logger.debug(f"{args[0]} exited with {completed.returncode}: {completed.stderr.strip()}")
    return CommandResult(completed.returncode, completed.stdout, completed.stderr)


CommandRunner = Callable[..., CommandResult]
