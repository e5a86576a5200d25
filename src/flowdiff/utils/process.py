"""Blocking runner for external tools (git, diff, the converter)."""

import subprocess

from pydantic import BaseModel, ConfigDict

from flowdiff.stages.exceptions import ToolLaunchError

TIMEOUT_EXIT_CODE = -1


class CommandResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    args: list[str]
    exit_code: int
    stdout: str
    stderr: str
    stdout_bytes: bytes = b""  # Undecoded stdout, for artifacts written verbatim
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace")


def run_command(
    args: list[str],
    cwd: str | None = None,
    timeout: float | None = None,
) -> CommandResult:
    """Run a command to completion and capture its output.

    A non-zero exit is returned, never raised. stdout and stderr are decoded
    as UTF-8 with undecodable bytes replaced; the raw stdout is kept in
    stdout_bytes.

    Args:
        args: Executable followed by its arguments.
        cwd: Working directory for the child process.
        timeout: Seconds before the child is killed, or None to wait forever.

    Returns:
        CommandResult. On timeout, exit_code is TIMEOUT_EXIT_CODE and
        stderr notes the deadline.

    Raises:
        ToolLaunchError: If the executable cannot be found or started.
    """
    try:
        result = subprocess.run(
            args,
            cwd=cwd,
            capture_output=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        return CommandResult(
            args=list(args),
            exit_code=TIMEOUT_EXIT_CODE,
            stdout="",
            stderr=f"{args[0]} timed out after {timeout}s",
            timed_out=True,
        )
    except OSError as exc:
        raise ToolLaunchError(f"Failed to launch {args[0]}: {exc}") from exc

    return CommandResult(
        args=list(args),
        exit_code=result.returncode,
        stdout=_decode(result.stdout),
        stderr=_decode(result.stderr),
        stdout_bytes=result.stdout or b"",
    )
