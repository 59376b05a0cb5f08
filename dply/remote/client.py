"""JSON-over-HTTP implementation of DeployApi."""

from __future__ import annotations

from collections.abc import Sequence
from urllib.parse import quote

from dply.core.result import Err, Ok, Result
from dply.core.structured import StrDict, as_obj_list, as_str_dict, get_str
from dply.release.errors import ReleaseError, ReleaseErrorKind
from dply.release.model import (
    DeploymentTask,
    Environment,
    Project,
    Release,
    SelectedPackage,
    Step,
    TaskState,
)
from dply.remote.http import HttpClient, HttpError

_TASK_STATES: dict[str, TaskState] = {
    "queued": "queued",
    "executing": "executing",
    "cancelling": "cancelling",
    "success": "success",
    "failed": "failed",
    "canceled": "canceled",
    "cancelled": "canceled",
    "timedout": "timed_out",
    "timed_out": "timed_out",
}


def _segment(value: str) -> str:
    return quote(value, safe="")


def _release_error(
    error: HttpError,
    *,
    message: str,
    not_found: ReleaseErrorKind,
) -> ReleaseError:
    kind: ReleaseErrorKind
    if error.is_transient:
        kind = "remote_unavailable"
    elif error.status in (401, 403):
        kind = "auth_required"
    elif error.status == 404:
        kind = not_found
    else:
        kind = "remote_rejected"
    return ReleaseError(kind=kind, message=message, hint=str(error))


def _unexpected(what: str) -> ReleaseError:
    return ReleaseError(kind="remote_rejected", message=f"unexpected {what} payload from server")


class RemoteDeployApi:
    """DeployApi over the server's REST endpoints (``<base_url>/api/...``)."""

    def __init__(self, base_url: str, http: HttpClient) -> None:
        self.base_url = base_url.rstrip("/")
        self._http = http

    def _url(self, path: str) -> str:
        return f"{self.base_url}/api/{path}"

    def _get(
        self, path: str, *, message: str, not_found: ReleaseErrorKind = "remote_rejected"
    ) -> Result[object, ReleaseError]:
        result = self._http.request_json("GET", self._url(path))
        if isinstance(result, Err):
            return Err(_release_error(result.error, message=message, not_found=not_found))
        return Ok(result.value)

    def _post(self, path: str, body: StrDict, *, message: str) -> Result[object, ReleaseError]:
        result = self._http.request_json("POST", self._url(path), body)
        if isinstance(result, Err):
            return Err(_release_error(result.error, message=message, not_found="remote_rejected"))
        return Ok(result.value)

    def get_project(self, name: str) -> Result[Project, ReleaseError]:
        obj = self._get(
            f"projects/{_segment(name)}",
            message=f"project not found: {name}",
            not_found="project_not_found",
        )
        if isinstance(obj, Err):
            return obj

        data = as_str_dict(obj.value)
        project_id = get_str(data, "Id") if data is not None else None
        if data is None or project_id is None:
            return Err(_unexpected("project"))
        return Ok(Project(id=project_id, name=get_str(data, "Name") or name))

    def find_environments(
        self, names: Sequence[str]
    ) -> Result[tuple[Environment, ...], ReleaseError]:
        obj = self._get("environments", message="failed to list environments")
        if isinstance(obj, Err):
            return obj

        raw = as_obj_list(obj.value)
        if raw is None:
            return Err(_unexpected("environments"))

        wanted = {n.casefold() for n in names}
        out: list[Environment] = []
        for item in raw:
            d = as_str_dict(item)
            if d is None:
                continue
            env_id = get_str(d, "Id")
            env_name = get_str(d, "Name")
            if env_id is None or env_name is None:
                continue
            if env_name.casefold() in wanted:
                out.append(Environment(id=env_id, name=env_name))
        return Ok(tuple(out))

    def list_steps(self, project: Project) -> Result[tuple[Step, ...], ReleaseError]:
        obj = self._get(
            f"projects/{_segment(project.id)}/steps",
            message=f"failed to list steps for project {project.name}",
            not_found="project_not_found",
        )
        if isinstance(obj, Err):
            return obj

        raw = as_obj_list(obj.value)
        if raw is None:
            return Err(_unexpected("steps"))

        steps: list[Step] = []
        for item in raw:
            d = as_str_dict(item)
            if d is None:
                continue
            step_id = get_str(d, "Id")
            package_id = get_str(d, "PackageId")
            # Steps without a package (scripts, manual interventions) are not released.
            if step_id is None or package_id is None:
                continue
            description = get_str(d, "Description") or step_id
            steps.append(Step(id=step_id, description=description, package_id=package_id))
        return Ok(tuple(steps))

    def _package_version(self, path: str, *, message: str) -> Result[str, ReleaseError]:
        obj = self._get(path, message=message, not_found="package_not_found")
        if isinstance(obj, Err):
            return obj

        data = as_str_dict(obj.value)
        version = get_str(data, "Version") if data is not None else None
        if version is None:
            return Err(_unexpected("package version"))
        return Ok(version)

    def latest_package(self, step: Step) -> Result[str, ReleaseError]:
        return self._package_version(
            f"packages/{_segment(step.package_id)}/versions/latest",
            message=f"no versions of package {step.package_id} found for step '{step.description}'",
        )

    def find_package(self, step: Step, version: str) -> Result[str, ReleaseError]:
        return self._package_version(
            f"packages/{_segment(step.package_id)}/versions/{_segment(version)}",
            message=f"package {step.package_id} version {version} not found",
        )

    def create_release(
        self,
        project: Project,
        packages: Sequence[SelectedPackage],
        version: str,
        notes: str | None,
    ) -> Result[Release, ReleaseError]:
        body: StrDict = {
            "ProjectId": project.id,
            "Version": version,
            "ReleaseNotes": notes,
            "SelectedPackages": [{"StepId": p.step_id, "Version": p.version} for p in packages],
        }
        obj = self._post("releases", body, message=f"failed to create release {version}")
        if isinstance(obj, Err):
            return obj

        data = as_str_dict(obj.value)
        release_id = get_str(data, "Id") if data is not None else None
        if data is None or release_id is None:
            return Err(_unexpected("release"))
        return Ok(Release(id=release_id, version=get_str(data, "Version") or version))

    def create_deployments(
        self,
        release: Release,
        environments: Sequence[Environment],
        force: bool,
    ) -> Result[tuple[DeploymentTask, ...], ReleaseError]:
        body: StrDict = {
            "ReleaseId": release.id,
            "EnvironmentIds": [e.id for e in environments],
            "ForcePackageRedeployment": force,
        }
        obj = self._post(
            "deployments", body, message=f"failed to deploy release {release.version}"
        )
        if isinstance(obj, Err):
            return obj

        raw = as_obj_list(obj.value)
        if raw is None:
            return Err(_unexpected("deployments"))

        names = {e.id: e.name for e in environments}
        tasks: list[DeploymentTask] = []
        for item in raw:
            d = as_str_dict(item)
            if d is None:
                return Err(_unexpected("deployment"))
            deployment_id = get_str(d, "Id")
            task_id = get_str(d, "TaskId")
            env_id = get_str(d, "EnvironmentId")
            if deployment_id is None or task_id is None or env_id is None:
                return Err(_unexpected("deployment"))
            tasks.append(
                DeploymentTask(
                    id=deployment_id,
                    task_id=task_id,
                    environment_id=env_id,
                    environment_name=names.get(env_id, ""),
                )
            )
        return Ok(tuple(tasks))

    def get_task_state(self, task: DeploymentTask) -> Result[TaskState, ReleaseError]:
        obj = self._get(
            f"tasks/{_segment(task.task_id)}",
            message=f"deployment task {task.task_id} not found",
            not_found="task_not_found",
        )
        if isinstance(obj, Err):
            return obj

        data = as_str_dict(obj.value)
        raw_state = get_str(data, "State") if data is not None else None
        if raw_state is None:
            return Err(_unexpected("task"))
        # States this client does not know yet are treated as still running.
        return Ok(_TASK_STATES.get(raw_state.casefold(), "executing"))
