"""Release creation workflow.

    validate -> project -> environments -> steps -> package versions
    -> release version -> create release -> [deploy] -> [watch]

Each stage either yields its value or ends the run with a ReleaseError. Nothing
is retried here and nothing is created on the server before every input was
resolved.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace

from dply.core.durations import format_duration
from dply.core.result import Err, Ok, Result
from dply.output.console import ConsoleProtocol
from dply.release.errors import ReleaseError
from dply.release.model import (
    DeploymentTask,
    Environment,
    Project,
    Release,
    SelectedPackage,
    Step,
)
from dply.release.resolver import resolve_constraint, select_package
from dply.release.settings import CreateReleaseSettings
from dply.release.version_select import select_release_version
from dply.release.watcher import WatchReport, wait_for_deployments
from dply.remote.protocol import DeployApi

Watcher = Callable[..., Result[WatchReport, ReleaseError]]


@dataclass(frozen=True, slots=True)
class CreateReleaseOutcome:
    project: Project
    release: Release
    packages: tuple[SelectedPackage, ...]
    deployments: tuple[DeploymentTask, ...]
    # None unless --waitfordeployment was given and something was deployed.
    watch: WatchReport | None = None


def validate_settings(settings: CreateReleaseSettings) -> Result[None, ReleaseError]:
    if not settings.project_name.strip():
        return Err(
            ReleaseError(
                kind="missing_project",
                message="please specify a project name",
                hint="--project XYZ",
            )
        )
    if settings.wait_for_deployment and settings.poll_interval <= 0:
        return Err(
            ReleaseError(
                kind="invalid_duration",
                message="the deployment status check interval must be greater than zero",
                hint="--deploymentchecksleepcycle 00:00:10",
            )
        )
    return Ok(None)


def _unique_names(names: Sequence[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for name in names:
        key = name.strip().casefold()
        if key and key not in seen:
            seen.add(key)
            out.append(name.strip())
    return out


def resolve_environments(
    api: DeployApi,
    names: Sequence[str],
    console: ConsoleProtocol,
) -> Result[tuple[Environment, ...], ReleaseError]:
    """Resolve every requested environment, in request order.

    Requesting nothing is valid (release only). Requesting a name the server
    does not know is an error.
    """
    wanted = _unique_names(names)
    if not wanted:
        console.debug("No environments requested; the release will not be deployed.")
        return Ok(())

    console.debug(f"Finding environments: {', '.join(wanted)}")
    found = api.find_environments(wanted)
    if isinstance(found, Err):
        return found

    by_name = {env.name.casefold(): env for env in found.value}
    missing = [name for name in wanted if name.casefold() not in by_name]
    if missing:
        return Err(
            ReleaseError(
                kind="environment_not_found",
                message=f"environment(s) not found: {', '.join(missing)}",
                hint="check --deployto names against the server",
            )
        )
    return Ok(tuple(by_name[name.casefold()] for name in wanted))


def resolve_packages(
    api: DeployApi,
    steps: Sequence[Step],
    settings: CreateReleaseSettings,
    console: ConsoleProtocol,
) -> Result[tuple[SelectedPackage, ...], ReleaseError]:
    """Pick one package version per step, in step order."""
    console.debug("Getting package versions for each step...")
    selected: list[SelectedPackage] = []
    for step in steps:
        constraint = resolve_constraint(
            step, settings.package_overrides, settings.package_version
        )
        package = select_package(api, step, constraint, force_version=settings.force_version)
        if isinstance(package, Err):
            return package

        source = "latest" if constraint is None else "requested"
        console.debug(f"{step.description} - {source}: {package.value.version}")
        selected.append(package.value)
    return Ok(tuple(selected))


def create_release(
    settings: CreateReleaseSettings,
    api: DeployApi,
    console: ConsoleProtocol,
    *,
    watch: Watcher = wait_for_deployments,
) -> Result[CreateReleaseOutcome, ReleaseError]:
    valid = validate_settings(settings)
    if isinstance(valid, Err):
        return valid

    console.debug(f"Finding project: {settings.project_name}")
    project = api.get_project(settings.project_name)
    if isinstance(project, Err):
        return project

    environments = resolve_environments(api, settings.environments, console)
    if isinstance(environments, Err):
        return environments

    console.debug("Finding steps for project...")
    steps = api.list_steps(project.value)
    if isinstance(steps, Err):
        return steps

    packages = resolve_packages(api, steps.value, settings, console)
    if isinstance(packages, Err):
        return packages

    version = select_release_version(settings.version_number, packages.value, console)
    if isinstance(version, Err):
        return version

    console.debug(f"Creating release: {version.value}")
    release = api.create_release(
        project.value, packages.value, version.value, settings.release_notes
    )
    if isinstance(release, Err):
        return release
    console.success(f"Release {release.value.version} created for {project.value.name}")

    outcome = CreateReleaseOutcome(
        project=project.value,
        release=release.value,
        packages=packages.value,
        deployments=(),
    )
    if not environments.value:
        return Ok(outcome)

    for env in environments.value:
        console.info(f"Deploying {project.value.name} {release.value.version} to: {env.name}")
    deployments = api.create_deployments(
        release.value, environments.value, settings.force_redeploy
    )
    if isinstance(deployments, Err):
        return deployments

    outcome = replace(outcome, deployments=deployments.value)
    if not settings.wait_for_deployment:
        return Ok(outcome)

    console.debug(
        f"Watching deployments (timeout {format_duration(settings.deployment_timeout)})"
    )
    report = watch(
        api,
        deployments.value,
        timeout=settings.deployment_timeout,
        poll_interval=settings.poll_interval,
        console=console,
    )
    if isinstance(report, Err):
        return report

    return Ok(replace(outcome, watch=report.value))
