"""In-memory DeployApi for workflow tests."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from dply.core.result import Err, Ok, Result
from dply.release.errors import ReleaseError
from dply.release.model import (
    DeploymentTask,
    Environment,
    Project,
    Release,
    SelectedPackage,
    Step,
    TaskState,
)

TaskReply = TaskState | ReleaseError


@dataclass
class FakeDeployApi:
    projects: dict[str, Project] = field(default_factory=dict)
    environments: list[Environment] = field(default_factory=list)
    steps: dict[str, tuple[Step, ...]] = field(default_factory=dict)
    # package id -> versions on the feed, oldest first
    feed: dict[str, list[str]] = field(default_factory=dict)
    # task id -> replies consumed in order, the last one repeating
    task_replies: dict[str, list[TaskReply]] = field(default_factory=dict)
    release_error: ReleaseError | None = None
    deploy_error: ReleaseError | None = None
    calls: list[tuple[object, ...]] = field(default_factory=list)

    def get_project(self, name: str) -> Result[Project, ReleaseError]:
        self.calls.append(("get_project", name))
        project = self.projects.get(name)
        if project is None:
            return Err(ReleaseError(kind="project_not_found", message=f"project not found: {name}"))
        return Ok(project)

    def find_environments(
        self, names: Sequence[str]
    ) -> Result[tuple[Environment, ...], ReleaseError]:
        self.calls.append(("find_environments", tuple(names)))
        wanted = {n.casefold() for n in names}
        return Ok(tuple(e for e in self.environments if e.name.casefold() in wanted))

    def list_steps(self, project: Project) -> Result[tuple[Step, ...], ReleaseError]:
        self.calls.append(("list_steps", project.id))
        return Ok(self.steps.get(project.id, ()))

    def latest_package(self, step: Step) -> Result[str, ReleaseError]:
        self.calls.append(("latest_package", step.package_id))
        versions = self.feed.get(step.package_id)
        if not versions:
            return Err(ReleaseError(kind="package_not_found", message="no versions"))
        return Ok(versions[-1])

    def find_package(self, step: Step, version: str) -> Result[str, ReleaseError]:
        self.calls.append(("find_package", step.package_id, version))
        if version in self.feed.get(step.package_id, []):
            return Ok(version)
        return Err(ReleaseError(kind="package_not_found", message="not found"))

    def create_release(
        self,
        project: Project,
        packages: Sequence[SelectedPackage],
        version: str,
        notes: str | None,
    ) -> Result[Release, ReleaseError]:
        self.calls.append(("create_release", project.id, tuple(packages), version, notes))
        if self.release_error is not None:
            return Err(self.release_error)
        return Ok(Release(id="Releases-1", version=version))

    def create_deployments(
        self,
        release: Release,
        environments: Sequence[Environment],
        force: bool,
    ) -> Result[tuple[DeploymentTask, ...], ReleaseError]:
        self.calls.append(("create_deployments", release.id, tuple(environments), force))
        if self.deploy_error is not None:
            return Err(self.deploy_error)
        return Ok(
            tuple(
                DeploymentTask(
                    id=f"Deployments-{i}",
                    task_id=f"ServerTasks-{i}",
                    environment_id=env.id,
                    environment_name=env.name,
                )
                for i, env in enumerate(environments, start=1)
            )
        )

    def get_task_state(self, task: DeploymentTask) -> Result[TaskState, ReleaseError]:
        self.calls.append(("get_task_state", task.task_id))
        replies = self.task_replies.get(task.task_id)
        if not replies:
            return Err(ReleaseError(kind="task_not_found", message=task.task_id))
        reply = replies.pop(0) if len(replies) > 1 else replies[0]
        if isinstance(reply, ReleaseError):
            return Err(reply)
        return Ok(reply)

    def count(self, name: str) -> int:
        return sum(1 for c in self.calls if c[0] == name)


class FakeClock:
    """Replaces ``monotonic`` and ``sleep``: sleeping advances the clock."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
