"""Contract the release workflow requires from the deployment server."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from dply.core.result import Result
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


@runtime_checkable
class DeployApi(Protocol):
    """Deployment server operations.

    Every call is a stateless request; errors come back as ReleaseError with a
    kind the caller can act on (``remote_unavailable`` is the only transient one).
    """

    def get_project(self, name: str) -> Result[Project, ReleaseError]: ...

    def find_environments(
        self, names: Sequence[str]
    ) -> Result[tuple[Environment, ...], ReleaseError]:
        """Return the environments matching ``names``; unknown names are omitted."""
        ...

    def list_steps(self, project: Project) -> Result[tuple[Step, ...], ReleaseError]:
        """Return the project's steps in deployment order."""
        ...

    def latest_package(self, step: Step) -> Result[str, ReleaseError]: ...

    def find_package(self, step: Step, version: str) -> Result[str, ReleaseError]:
        """Return the feed's version string matching ``version``.

        Err(kind="package_not_found") when the feed has no such version.
        """
        ...

    def create_release(
        self,
        project: Project,
        packages: Sequence[SelectedPackage],
        version: str,
        notes: str | None,
    ) -> Result[Release, ReleaseError]: ...

    def create_deployments(
        self,
        release: Release,
        environments: Sequence[Environment],
        force: bool,
    ) -> Result[tuple[DeploymentTask, ...], ReleaseError]:
        """Deploy ``release`` to every environment in one request."""
        ...

    def get_task_state(self, task: DeploymentTask) -> Result[TaskState, ReleaseError]: ...
