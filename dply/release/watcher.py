"""Deployment completion polling.

One loop checks every unfinished deployment task, then sleeps for the poll
interval, until all tasks reached a terminal state or the timeout elapsed.
Deployments still running at the timeout are reported as ``timed_out``: the
server keeps running them, the watch just stopped looking.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from time import monotonic, sleep
from typing import Literal

from dply.core.durations import format_duration
from dply.core.result import Err, Ok, Result
from dply.output.console import ConsoleProtocol
from dply.release.errors import ReleaseError
from dply.release.model import DeploymentTask, TaskState, is_terminal
from dply.remote.protocol import DeployApi

DeploymentOutcome = Literal["succeeded", "failed", "timed_out"]


@dataclass(frozen=True, slots=True)
class TaskResult:
    task: DeploymentTask
    outcome: DeploymentOutcome
    # Last state observed, None if no status check ever succeeded.
    state: TaskState | None


@dataclass(frozen=True, slots=True)
class WatchReport:
    results: tuple[TaskResult, ...]
    elapsed: float
    polls: int

    @property
    def all_succeeded(self) -> bool:
        return all(r.outcome == "succeeded" for r in self.results)

    @property
    def failed(self) -> tuple[TaskResult, ...]:
        return tuple(r for r in self.results if r.outcome == "failed")

    @property
    def timed_out(self) -> tuple[TaskResult, ...]:
        return tuple(r for r in self.results if r.outcome == "timed_out")


def _outcome(state: TaskState | None) -> DeploymentOutcome:
    if state is None or not is_terminal(state):
        return "timed_out"
    if state == "success":
        return "succeeded"
    return "failed"


def wait_for_deployments(
    api: DeployApi,
    tasks: Sequence[DeploymentTask],
    *,
    timeout: float,
    poll_interval: float,
    console: ConsoleProtocol,
) -> Result[WatchReport, ReleaseError]:
    """Poll ``tasks`` until all finished or ``timeout`` seconds elapsed.

    Transient status errors skip the task for the current round. Any other
    error ends the watch immediately.

    Returns:
        Ok(WatchReport) with one result per task, in input order.
    """
    start = monotonic()
    states: dict[str, TaskState | None] = {t.id: None for t in tasks}
    polls = 0

    if tasks:
        console.info(
            f"Waiting for {len(tasks)} deployment(s) to finish "
            f"(timeout {format_duration(timeout)}, checking every {format_duration(poll_interval)})"
        )

    while tasks:
        polls += 1
        for task in tasks:
            previous = states[task.id]
            if previous is not None and is_terminal(previous):
                continue

            current = api.get_task_state(task)
            if isinstance(current, Err):
                if current.error.is_transient:
                    console.debug(
                        f"{task.label}: status check failed, retrying: {current.error.message}"
                    )
                    continue
                return current

            if current.value != previous:
                console.info(f"{task.label}: {current.value}")
            states[task.id] = current.value

        if all(s is not None and is_terminal(s) for s in states.values()):
            break
        if monotonic() - start >= timeout:
            break
        sleep(poll_interval)

    results = tuple(
        TaskResult(task=t, outcome=_outcome(states[t.id]), state=states[t.id]) for t in tasks
    )
    return Ok(WatchReport(results=results, elapsed=monotonic() - start, polls=polls))
