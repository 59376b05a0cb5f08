"""Immutable input for one ``create-release`` run."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType

from dply.core.config import DEFAULT_DEPLOYMENT_TIMEOUT_SECONDS, DEFAULT_POLL_INTERVAL_SECONDS
from dply.release.model import PackageVersionOverrides


def _no_overrides() -> PackageVersionOverrides:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class CreateReleaseSettings:
    """Everything the release workflow needs, built once from parsed options.

    Attributes:
        project_name: Project to release (required, non-blank).
        environments: Environment names to deploy to; empty means release only.
        version_number: Release version; inferred from packages when None.
        package_version: Version used for every step without an override.
        package_overrides: Package id -> version, taking precedence over package_version.
        force_version: Use constraints verbatim without checking the package feed.
        force_redeploy: Redeploy packages already installed on the targets.
        release_notes: Free text attached to the release.
        wait_for_deployment: Block until deployments finish or time out.
        deployment_timeout: Seconds to wait for deployments.
        poll_interval: Seconds between deployment status checks.
        delay: Seconds to defer the whole run, or None.
        already_waited: This process is the detached run of a delayed invocation.
    """

    project_name: str
    environments: tuple[str, ...] = ()
    version_number: str | None = None
    package_version: str | None = None
    package_overrides: PackageVersionOverrides = field(default_factory=_no_overrides)
    force_version: bool = False
    force_redeploy: bool = False
    release_notes: str | None = None
    wait_for_deployment: bool = False
    deployment_timeout: float = DEFAULT_DEPLOYMENT_TIMEOUT_SECONDS
    poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS
    delay: float | None = None
    already_waited: bool = False
