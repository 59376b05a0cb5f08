from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from dply.core.config import API_KEY_ENV_VAR, SERVER_ENV_VAR, Config, find_config
from dply.core.errors import ErrorCode
from dply.core.result import Err, Ok, Result
from dply.output.console import ConsoleProtocol, RichConsole, Style
from dply.release.errors import ReleaseError
from dply.remote.client import RemoteDeployApi
from dply.remote.http import RealHttpClient
from dply.remote.protocol import DeployApi


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    console: ConsoleProtocol


def build_context(*, config_path: Path | None = None, verbose: bool = False) -> CLIContext:
    console = RichConsole(verbose=verbose)

    config_result = find_config(config_path)
    if isinstance(config_result, Err):
        console.error(config_result.error.message)
        if config_result.error.path is not None:
            console.print(f"hint: {config_result.error.path}", Style.DIM)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(config=config_result.value.with_environment(), console=console)


def connect_api(
    config: Config,
    *,
    server: str | None = None,
    api_key: str | None = None,
) -> Result[DeployApi, ReleaseError]:
    """Build the server client. No request is sent until the first API call."""
    url = (server or "").strip() or config.server.url
    if not url:
        return Err(
            ReleaseError(
                kind="missing_server",
                message="no deployment server configured",
                hint=f"pass --server, set {SERVER_ENV_VAR}, or add [server] url to dply.toml",
            )
        )
    if not url.startswith(("http://", "https://")):
        return Err(
            ReleaseError(
                kind="missing_server",
                message=f"invalid server URL: {url}",
                hint="expected http:// or https://",
            )
        )

    key = (api_key or "").strip() or config.server.api_key
    if not key:
        return Err(
            ReleaseError(
                kind="missing_server",
                message="no API key configured",
                hint=f"pass --apikey, set {API_KEY_ENV_VAR}, or add [server] api_key to dply.toml",
            )
        )

    http = RealHttpClient(api_key=key, timeout=config.server.timeout)
    return Ok(RemoteDeployApi(url, http))
