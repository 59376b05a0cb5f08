"""Delayed execution of ``create-release``.

A delayed run does not sleep in the invoking process. It re-launches the same
command line plus ``--wait`` as a detached process and returns at once; the
detached process sees ``--wait``, sleeps for the delay, then does the work.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from time import sleep
from typing import Literal

from dply.core.durations import format_duration
from dply.core.result import Err, Ok, Result
from dply.output.console import ConsoleProtocol
from dply.platform.process import ProcessError, spawn_detached
from dply.release.errors import ReleaseError

ExecutionPlan = Literal["run_now", "detach", "sleep_then_run"]
Spawner = Callable[[list[str]], Result[int, ProcessError]]

WAIT_FLAG = "--wait"


def plan_execution(delay: float | None, already_waited: bool) -> ExecutionPlan:
    if delay is None:
        return "run_now"
    if already_waited:
        return "sleep_then_run"
    return "detach"


def detached_argv(argv: Sequence[str]) -> list[str]:
    """The command line for the detached run: ``argv`` plus the wait flag.

    The flag is always appended. ``--wait`` already present in ``argv`` may be
    the value of another option, and repeating a boolean flag is harmless.
    """
    return [*argv, WAIT_FLAG]


def apply_execution_plan(
    plan: ExecutionPlan,
    *,
    delay: float | None,
    argv: Sequence[str],
    console: ConsoleProtocol,
    spawn: Spawner = spawn_detached,
) -> Result[bool, ReleaseError]:
    """Carry out ``plan``.

    Returns:
        Ok(True) when this process should go on and create the release,
        Ok(False) when a detached process took over and this one should exit.
    """
    match plan:
        case "run_now":
            return Ok(True)
        case "sleep_then_run":
            seconds = delay or 0.0
            console.debug(f"Waiting {format_duration(seconds)} to create release ...")
            sleep(seconds)
            return Ok(True)
        case "detach":
            cmd = detached_argv(argv)
            spawned = spawn(cmd)
            if isinstance(spawned, Err):
                return Err(
                    ReleaseError(
                        kind="spawn_failed",
                        message="failed to start the delayed create-release process",
                        hint=spawned.error.stderr.strip() or str(spawned.error),
                    )
                )
            console.info(
                f"Successfully scheduled create release command "
                f"(pid {spawned.value}, runs in {format_duration(delay or 0.0)})."
            )
            return Ok(False)
