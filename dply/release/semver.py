"""Semantic version parsing and ordering.

Package feeds publish NuGet-flavoured versions, so besides strict
``MAJOR.MINOR.PATCH[-pre][+build]`` this accepts a leading ``v``, two-part
versions (``1.2`` == ``1.2.0``), a fourth revision number (``1.2.3.4``) and
leading zeros in the numeric parts (``2024.01.15`` == ``2024.1.15``).
Numeric pre-release identifiers stay strict.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering

from dply.core.result import Err, Ok, Result
from dply.release.errors import ReleaseError

_VERSION_RE = re.compile(
    r"^v?(?P<major>\d+)\.(?P<minor>\d+)"
    r"(?:\.(?P<patch>\d+))?(?:\.(?P<revision>\d+))?"
    r"(?:-(?P<pre>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)

PrereleaseId = int | str


def _prerelease_key(ids: tuple[PrereleaseId, ...]) -> tuple[tuple[int, int, str], ...]:
    # Numeric identifiers sort numerically and before alphanumeric ones.
    return tuple((0, i, "") if isinstance(i, int) else (1, 0, i) for i in ids)


@total_ordering
@dataclass(frozen=True, slots=True)
class SemanticVersion:
    major: int
    minor: int
    patch: int
    revision: int = 0
    prerelease: tuple[PrereleaseId, ...] = ()
    build: str = field(default="", compare=False)

    def _key(self) -> tuple[object, ...]:
        # A release sorts after every pre-release of the same version.
        return (
            self.major,
            self.minor,
            self.patch,
            self.revision,
            not self.prerelease,
            _prerelease_key(self.prerelease),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: SemanticVersion) -> bool:
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        out = f"{self.major}.{self.minor}.{self.patch}"
        if self.revision:
            out += f".{self.revision}"
        if self.prerelease:
            out += "-" + ".".join(str(i) for i in self.prerelease)
        if self.build:
            out += f"+{self.build}"
        return out


def _parse_prerelease(text: str) -> tuple[PrereleaseId, ...] | None:
    ids: list[PrereleaseId] = []
    for part in text.split("."):
        if part.isdigit():
            if len(part) > 1 and part.startswith("0"):
                return None
            ids.append(int(part))
        else:
            ids.append(part)
    return tuple(ids)


def parse_version(text: str) -> Result[SemanticVersion, ReleaseError]:
    """Parse ``text`` into a SemanticVersion.

    Returns:
        Ok(SemanticVersion), or Err(kind="invalid_version") naming the bad input.
    """
    m = _VERSION_RE.match(text.strip())
    prerelease: tuple[PrereleaseId, ...] | None = ()
    if m is not None and m.group("pre"):
        prerelease = _parse_prerelease(m.group("pre"))
    if m is None or prerelease is None:
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=f"invalid version: {text!r}",
                hint="expected MAJOR.MINOR[.PATCH[.REVISION]][-prerelease][+build]",
            )
        )

    return Ok(
        SemanticVersion(
            major=int(m.group("major")),
            minor=int(m.group("minor")),
            patch=int(m.group("patch") or 0),
            revision=int(m.group("revision") or 0),
            prerelease=prerelease,
            build=m.group("build") or "",
        )
    )
