"""Blocking execution of external commands."""

import logging
import subprocess
from collections.abc import Callable, Sequence
from typing import NamedTuple

logger = logging.getLogger(__name__)

# Return code reported when the command could not be run at all.
NOT_RUN = 127


class CommandResult(NamedTuple):
    """Outcome of an external command."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


CommandRunner = Callable[[Sequence[str]], CommandResult]


def run_command(cmd: Sequence[str], timeout: float | None = None) -> CommandResult:
    """
    Run a command and capture its output.

    Never raises when the program cannot be started or the timeout
    expires; both are reported as a non-zero return code.

    Args:
        cmd: Program and arguments.
        timeout: Seconds to wait, or None to wait indefinitely.
    """
    try:
        result = subprocess.run(
            list(cmd),
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except OSError as exc:
        logger.debug("command %s not run: %s", cmd[0], exc)
        return CommandResult(NOT_RUN, "", str(exc))
    except subprocess.TimeoutExpired:
        logger.debug("command %s timed out after %ss", cmd[0], timeout)
        return CommandResult(NOT_RUN, "", f"timed out after {timeout}s")
    return CommandResult(result.returncode, result.stdout, result.stderr)
