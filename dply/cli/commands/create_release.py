from __future__ import annotations

import sys
from pathlib import Path
from types import MappingProxyType

import typer

from dply.cli.commands._helpers import exit_release_error, exit_with_code
from dply.cli.context import build_context, connect_api
from dply.core.config import delayed_run_log_path
from dply.core.durations import format_duration, parse_duration
from dply.core.errors import ErrorCode
from dply.core.result import Err, Result
from dply.output.console import ConsoleProtocol, Style
from dply.platform.process import ProcessError, self_command, spawn_detached
from dply.release.errors import ReleaseError
from dply.release.flow import CreateReleaseOutcome, create_release, validate_settings
from dply.release.notes import resolve_release_notes
from dply.release.overrides import build_overrides
from dply.release.schedule import apply_execution_plan, plan_execution
from dply.release.settings import CreateReleaseSettings
from dply.release.watcher import WatchReport


def _duration_option(value: str | None, *, flag: str, console: ConsoleProtocol) -> float | None:
    if value is None:
        return None
    parsed = parse_duration(value)
    if isinstance(parsed, Err):
        exit_release_error(
            ReleaseError(
                kind="invalid_duration",
                message=f"invalid {flag}: {value!r}",
                hint=parsed.error.message,
            ),
            console,
        )
    return parsed.value


def _invocation_argv() -> list[str]:
    return [*self_command(), *sys.argv[1:]]


def _spawn_delayed_run(cmd: list[str]) -> Result[int, ProcessError]:
    return spawn_detached(cmd, log_path=delayed_run_log_path())


def _watch_exit_code(report: WatchReport, console: ConsoleProtocol) -> ErrorCode:
    for result in report.results:
        label = result.task.label
        match result.outcome:
            case "succeeded":
                console.success(f"{label}: deployment succeeded")
            case "failed":
                console.error(f"{label}: deployment {result.state}")
            case "timed_out":
                console.warning(
                    f"{label}: deployment still {result.state or 'pending'} after "
                    f"{format_duration(report.elapsed)}; it may still complete on the server"
                )

    if report.failed:
        return ErrorCode.DEPLOYMENT_FAILED
    if report.timed_out:
        return ErrorCode.DEPLOYMENT_UNFINISHED
    return ErrorCode.OK


def _print_summary(outcome: CreateReleaseOutcome, console: ConsoleProtocol) -> None:
    console.print(
        f"{outcome.project.name} {outcome.release.version}: "
        f"{len(outcome.packages)} package(s), {len(outcome.deployments)} deployment(s)",
        Style.DIM,
    )


def create_release_cmd(
    project: str = typer.Option("", "--project", help="Name of the project"),
    deploy_to: list[str] = typer.Option(
        [], "--deployto", help="Environment to automatically deploy to, e.g., Production"
    ),
    version: str | None = typer.Option(
        None, "--version", help="Version number to use for the new release"
    ),
    package_version: str | None = typer.Option(
        None, "--packageversion", help="Version number of the package to use for this release"
    ),
    package_overrides: list[str] = typer.Option(
        [],
        "--packageversionoverride",
        help="Version number to use for one package in the release (PackageId=Version)",
    ),
    force_version: bool = typer.Option(
        False,
        "--forceversion",
        help="Use the requested package versions without checking the feed first",
    ),
    force: bool = typer.Option(
        False, "--force", help="Force redeployment of already installed packages"
    ),
    release_notes: str | None = typer.Option(
        None, "--releasenotes", help="Release notes for the new release"
    ),
    release_notes_file: Path | None = typer.Option(
        None, "--releasenotesfile", help="Path to a file that contains release notes"
    ),
    wait_for_deployment: bool = typer.Option(
        False, "--waitfordeployment", help="Wait for the deployments to finish"
    ),
    deployment_timeout: str | None = typer.Option(
        None,
        "--deploymenttimeout",
        help="Maximum time a deployment may take, e.g. 00:10:00 (default 00:10:00)",
    ),
    check_interval: str | None = typer.Option(
        None,
        "--deploymentchecksleepcycle",
        help="Time between deployment status checks, e.g. 00:00:10 (default 00:00:10)",
    ),
    delay: str | None = typer.Option(
        None,
        "--delay",
        help=(
            "Create the release after this delay, from a detached background process "
            "whose output goes to delayed-runs.log in the user config directory"
        ),
    ),
    already_waited: bool = typer.Option(
        False,
        "--wait",
        help="Wait the --delay in this process before executing (set by the detached run)",
    ),
    server: str | None = typer.Option(None, "--server", help="Deployment server URL"),
    api_key: str | None = typer.Option(None, "--apikey", help="Deployment server API key"),
    config_path: Path | None = typer.Option(None, "--config", help="Path to a dply.toml file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug output"),
) -> None:
    """Create a release, optionally deploy it and wait for the deployments."""
    ctx = build_context(config_path=config_path, verbose=verbose)
    console = ctx.console

    overrides = build_overrides(package_overrides)
    if isinstance(overrides, Err):
        exit_release_error(overrides.error, console)

    notes = resolve_release_notes(text=release_notes, path=release_notes_file)
    if isinstance(notes, Err):
        exit_release_error(notes.error, console)

    timeout = _duration_option(deployment_timeout, flag="--deploymenttimeout", console=console)
    interval = _duration_option(check_interval, flag="--deploymentchecksleepcycle", console=console)
    delay_seconds = _duration_option(delay, flag="--delay", console=console)

    settings = CreateReleaseSettings(
        project_name=project,
        environments=tuple(deploy_to),
        version_number=version,
        package_version=package_version,
        package_overrides=MappingProxyType(overrides.value),
        force_version=force_version,
        force_redeploy=force,
        release_notes=notes.value,
        wait_for_deployment=wait_for_deployment,
        deployment_timeout=ctx.config.deploy.timeout if timeout is None else timeout,
        poll_interval=ctx.config.deploy.poll_interval if interval is None else interval,
        delay=delay_seconds,
        already_waited=already_waited,
    )
    valid = validate_settings(settings)
    if isinstance(valid, Err):
        exit_release_error(valid.error, console)

    api = connect_api(ctx.config, server=server, api_key=api_key)
    if isinstance(api, Err):
        exit_release_error(api.error, console)

    proceed = apply_execution_plan(
        plan_execution(settings.delay, settings.already_waited),
        delay=settings.delay,
        argv=_invocation_argv(),
        console=console,
        spawn=_spawn_delayed_run,
    )
    if isinstance(proceed, Err):
        exit_release_error(proceed.error, console)
    if not proceed.value:
        console.info(f"Output of the delayed run is appended to {delayed_run_log_path()}")
        return

    outcome = create_release(settings, api.value, console)
    if isinstance(outcome, Err):
        exit_release_error(outcome.error, console)

    _print_summary(outcome.value, console)
    if outcome.value.watch is not None:
        code = _watch_exit_code(outcome.value.watch, console)
        if code != ErrorCode.OK:
            exit_with_code(int(code))
