"""
Subprocess execution for crosskit.

All external tools are spawned through CommandRunner so that every
invocation is logged, captured and reaped the same way.
"""

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)


class CommandTimeout(Exception):
    """Raised when a command exceeds its bounded wait."""

    def __init__(self, args: Sequence[str], timeout: float, stdout: str, stderr: str):
        self.args_list = list(args)
        self.timeout = timeout
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(f"Command timed out after {timeout}s: {shlex.join(args)}")


class CommandNotFound(Exception):
    """Raised when the executable of a command cannot be found."""

    def __init__(self, executable: str):
        self.executable = executable
        super().__init__(f"Executable not found: {executable}")


@dataclass(frozen=True)
class CommandResult:
    """Captured result of a finished command."""

    args: List[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def _as_text(data) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


class CommandRunner:
    """Run external commands with captured output."""

    def __init__(self, timeout: Optional[float] = None):
        """
        Initialize command runner.

        Args:
            timeout: Optional bounded wait in seconds for every command
        """
        self.timeout = timeout

    def run(self, args: Sequence[str]) -> CommandResult:
        """
        Run a command to completion.

        The child is always waited on; on timeout it is killed before
        CommandTimeout is raised.

        Args:
            args: Full argument list, executable first

        Returns:
            CommandResult with exit code and captured output

        Raises:
            CommandNotFound: If the executable does not exist
            CommandTimeout: If the bounded wait expires
        """
        args = [str(a) for a in args]
        logger.info(f"$ {shlex.join(args)}")

        try:
            completed = subprocess.run(
                args,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise CommandNotFound(args[0]) from e
        except subprocess.TimeoutExpired as e:
            raise CommandTimeout(
                args, e.timeout, _as_text(e.stdout), _as_text(e.stderr)
            ) from e

        logger.debug(f"Exit code {completed.returncode}: {args[0]}")
        return CommandResult(
            args=args,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
