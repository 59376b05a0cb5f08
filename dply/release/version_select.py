from __future__ import annotations

from collections.abc import Sequence

from dply.core.result import Err, Ok, Result
from dply.output.console import ConsoleProtocol
from dply.release.errors import ReleaseError
from dply.release.model import SelectedPackage
from dply.release.semver import SemanticVersion, parse_version


def select_release_version(
    explicit: str | None,
    selected: Sequence[SelectedPackage],
    console: ConsoleProtocol,
) -> Result[str, ReleaseError]:
    """Use the explicit version, else the highest selected package version."""
    if explicit is not None and explicit.strip():
        return Ok(explicit)

    if not selected:
        return Err(
            ReleaseError(
                kind="no_packages",
                message="cannot infer a release version: the project has no package steps",
                hint="pass --version explicitly",
            )
        )

    versions: list[SemanticVersion] = []
    for package in selected:
        parsed = parse_version(package.version)
        if isinstance(parsed, Err):
            return Err(
                ReleaseError(
                    kind="invalid_version",
                    message=f"cannot infer a release version: {parsed.error.message}",
                    hint=f"step {package.step_id}; pass --version explicitly",
                )
            )
        versions.append(parsed.value)

    chosen = str(max(versions))
    console.warning(
        "A --version parameter was not specified, so a version number was automatically "
        f"selected based on the highest package version: {chosen}"
    )
    return Ok(chosen)
