"""Detached process launch with Result-based error handling.

The delayed ``create-release`` path re-launches ``dply`` in the background and
lets the launching process exit. The child runs in its own session without the
caller's terminal, so it survives the terminal or CI step that started it. Its
output goes to a log file when one is given, otherwise it is discarded.

Usage:
    result = spawn_detached([*self_command(), "create-release", "--wait"])
    match result:
        case Ok(pid):
            print(f"scheduled as pid {pid}")
        case Err(error):
            print(f"Failed: {error.stderr}")
"""

from __future__ import annotations

import subprocess
import sys
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any

from dply.core.result import Err, Ok, Result

from .detection import is_windows

__all__ = ["ProcessError", "self_command", "spawn_detached"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a process that could not be started.

    Attributes:
        command: The command that was executed.
        returncode: Exit code, or -1 when the process never started.
        stdout: Standard output (may be empty).
        stderr: Standard error or the OS error text.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


def self_command() -> list[str]:
    """Command prefix that runs this same ``dply`` installation."""
    return [sys.executable, "-m", "dply"]


def _detach_options() -> dict[str, Any]:
    if is_windows():
        flags = getattr(subprocess, "DETACHED_PROCESS", 0) | getattr(
            subprocess, "CREATE_NEW_PROCESS_GROUP", 0
        )
        return {"creationflags": flags}
    return {"start_new_session": True}


def spawn_detached(
    cmd: list[str],
    cwd: Path | None = None,
    *,
    log_path: Path | None = None,
) -> Result[int, ProcessError]:
    """Start ``cmd`` as an independent background process.

    Does not wait for the child. Its stdin is detached from the caller; its
    stdout and stderr are appended to ``log_path``, or discarded.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory (current directory if None).
        log_path: File receiving the child's output (parent dirs are created).

    Returns:
        Ok(pid) once the OS confirmed the launch, Err(ProcessError) otherwise.
    """
    try:
        with ExitStack() as stack:
            output: IO[bytes] | int = subprocess.DEVNULL
            if log_path is not None:
                log_path.parent.mkdir(parents=True, exist_ok=True)
                output = stack.enter_context(log_path.open("ab"))
            proc = subprocess.Popen(
                cmd,
                cwd=str(cwd) if cwd else None,
                stdin=subprocess.DEVNULL,
                stdout=output,
                stderr=subprocess.STDOUT,
                close_fds=True,
                **_detach_options(),
            )
    except OSError as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout="",
                stderr=str(e),
            )
        )

    return Ok(proc.pid)
