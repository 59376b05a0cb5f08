"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import NoReturn

import typer

from dply.core.errors import ErrorCode
from dply.output.console import ConsoleProtocol, Style
from dply.release.errors import ReleaseError, ReleaseErrorKind

_ENV_KINDS: frozenset[ReleaseErrorKind] = frozenset(
    {"missing_server", "auth_required", "spawn_failed"}
)
_NETWORK_KINDS: frozenset[ReleaseErrorKind] = frozenset(
    {"remote_rejected", "remote_unavailable", "task_not_found"}
)


def release_error_code(kind: ReleaseErrorKind) -> ErrorCode:
    if kind in _ENV_KINDS:
        return ErrorCode.ENV_ERROR
    if kind in _NETWORK_KINDS:
        return ErrorCode.NETWORK_ERROR
    if kind == "io_error":
        return ErrorCode.IO_ERROR
    return ErrorCode.USER_ERROR


def exit_release_error(error: ReleaseError, console: ConsoleProtocol) -> NoReturn:
    """Render ``error`` and exit with the code for its kind."""
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)
    raise typer.Exit(code=int(release_error_code(error.kind)))


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=code)
