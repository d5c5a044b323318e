"""
Blocking execution of backend command lines.

Providers build command strings; this module runs them and hands back the
captured output. Exit codes are reported, never interpreted here.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Optional

from statesync.core.errors import ExecutorError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Captured stdout, stderr and exit status of one command."""

    output: str
    exit_status: int
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_status == 0


class CommandExecutor:
    """Runs command lines through the shell and blocks until they finish."""

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    def run(self, command: str) -> CommandResult:
        """Run `command`, capturing stdout and stderr separately."""
        logger.debug(f"Executing {command!r}")
        try:
            result = subprocess.run(
                command,
                shell=True,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ExecutorError(f"Command timed out: {command}") from e
        except OSError as e:
            raise ExecutorError(f"Could not launch {command!r}: {e}") from e
        return CommandResult(output=result.stdout or "", exit_status=result.returncode, error=result.stderr or "")

    def which(self, tool: str) -> Optional[str]:
        """Return the full path of `tool`, or None when it is not installed."""
        return shutil.which(tool)
