from __future__ import annotations

from dply.core.result import Err, Ok, Result
from dply.release.errors import ReleaseError
from dply.release.model import PackageVersionOverrides, SelectedPackage, Step
from dply.remote.protocol import DeployApi


def resolve_constraint(
    step: Step,
    overrides: PackageVersionOverrides,
    global_version: str | None,
) -> str | None:
    """Return the version this step is pinned to, or None for "latest".

    A per-package override wins over the global package version.
    """
    override = overrides.get(step.package_id)
    if override is not None:
        return override
    if global_version is not None and global_version.strip():
        return global_version
    return None


def select_package(
    api: DeployApi,
    step: Step,
    constraint: str | None,
    *,
    force_version: bool,
) -> Result[SelectedPackage, ReleaseError]:
    if constraint is None:
        latest = api.latest_package(step)
        if isinstance(latest, Err):
            return latest
        return Ok(SelectedPackage(step_id=step.id, version=latest.value))

    if force_version:
        # Trusted as-is: the package may not be pushed to the feed yet.
        return Ok(SelectedPackage(step_id=step.id, version=constraint))

    found = api.find_package(step, constraint)
    if isinstance(found, Err):
        if found.error.kind == "package_not_found":
            return Err(
                ReleaseError(
                    kind="package_not_found",
                    message=(
                        f"step '{step.description}': package {step.package_id} "
                        f"version {constraint} was not found"
                    ),
                    hint="check the version, or use --forceversion to skip the feed lookup",
                )
            )
        return found
    return Ok(SelectedPackage(step_id=step.id, version=found.value))
