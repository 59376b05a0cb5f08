"""Error type for the release workflow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    # configuration, detected before any network call
    "missing_project",
    "missing_server",
    "duplicate_override",
    "invalid_input",
    "invalid_duration",
    # resolution
    "project_not_found",
    "environment_not_found",
    "package_not_found",
    "invalid_version",
    "no_packages",
    # remote calls
    "remote_rejected",
    "remote_unavailable",
    "auth_required",
    # monitoring
    "task_not_found",
    # process / io
    "spawn_failed",
    "io_error",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Canonical error payload.

    Stable across resolve/flow/remote layers; the CLI renders it without
    knowing which layer produced it.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    @property
    def is_transient(self) -> bool:
        """True when retrying the same request later may succeed."""
        return self.kind == "remote_unavailable"
