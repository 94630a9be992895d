"""
Running of external configuration commands with a bounded timeout.
"""
import logging
import subprocess
from typing import List, Optional, Tuple

from router.errors import BackendCallError

logger = logging.getLogger("router.command")

# Default timeout for a configuration command, in seconds
COMMAND_TIMEOUT = 5.0


def run_command(args: List[str], stdin: Optional[str] = None,
                timeout: float = COMMAND_TIMEOUT, check: bool = True) -> Tuple[int, str]:
    """
    Run a command and capture its combined output

    Args:
        args: Command line
        stdin: Text fed to the command's standard input
        timeout: Seconds after which the command is killed
        check: Raise on non-zero exit status

    Returns:
        Tuple of (exit status, combined stdout/stderr)

    Raises:
        BackendCallError: If the command cannot be started, times out, or
            (with check) exits non-zero
    """
    logger.debug(f"Running: {' '.join(args)}")
    try:
        result = subprocess.run(
            args,
            input=stdin.encode() if stdin is not None else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        output = (e.output or b"").decode(errors="replace")
        raise BackendCallError.for_args(args, output, f"timed out after {timeout}s") from e
    except OSError as e:
        raise BackendCallError.for_args(args, cause=str(e)) from e

    output = result.stdout.decode(errors="replace") if result.stdout else ""
    if check and result.returncode != 0:
        raise BackendCallError.for_args(args, output, f"exit status {result.returncode}")
    return result.returncode, output
