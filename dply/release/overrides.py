from __future__ import annotations

from collections.abc import Iterable

from dply.core.result import Err, Ok, Result
from dply.release.errors import ReleaseError

_SEPARATORS = ("=", ":")


def parse_package_override(item: str) -> Result[tuple[str, str], ReleaseError]:
    """Split ``PackageId=1.2.3`` (or ``PackageId:1.2.3``) into its two parts."""
    for sep in _SEPARATORS:
        if sep in item:
            package_id, version = item.split(sep, 1)
            package_id = package_id.strip()
            version = version.strip()
            if package_id and version:
                return Ok((package_id, version))
            break

    return Err(
        ReleaseError(
            kind="invalid_input",
            message=f"invalid package version override: {item!r}",
            hint="expected PackageId=Version, e.g. --packageversionoverride WebShop.Api=1.4.2",
        )
    )


def build_overrides(items: Iterable[str]) -> Result[dict[str, str], ReleaseError]:
    """Build the package id -> version map, rejecting a second constraint per package."""
    out: dict[str, str] = {}
    for item in items:
        parsed = parse_package_override(item)
        if isinstance(parsed, Err):
            return parsed

        package_id, version = parsed.value
        if package_id in out:
            return Err(
                ReleaseError(
                    kind="duplicate_override",
                    message=f"more than one constraint was specified for package {package_id}",
                    hint=f"{package_id}={out[package_id]} and {package_id}={version}",
                )
            )
        out[package_id] = version

    return Ok(out)
