"""Typed configuration loading.

The server connection and watch defaults live in a small TOML file:

    [server]
    url = "https://deploy.example.com"
    api_key = "API-XXXXXXXX"
    timeout = 30

    [deploy]
    timeout = "00:10:00"
    poll_interval = "00:00:10"

Precedence is command-line flag > environment variable > file > default.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from dply.platform.detection import is_windows

from .durations import parse_duration
from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_number, get_str, get_table

__all__ = [
    "Config",
    "ConfigError",
    "DeployConfig",
    "ServerConfig",
    "delayed_run_log_path",
    "find_config",
    "load_config",
    "user_config_dir",
    # Defaults
    "DEFAULT_DEPLOYMENT_TIMEOUT_SECONDS",
    "DEFAULT_HTTP_TIMEOUT_SECONDS",
    "DEFAULT_POLL_INTERVAL_SECONDS",
    "API_KEY_ENV_VAR",
    "SERVER_ENV_VAR",
]

DEFAULT_DEPLOYMENT_TIMEOUT_SECONDS = 10 * 60.0
DEFAULT_POLL_INTERVAL_SECONDS = 10.0
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0

SERVER_ENV_VAR = "DPLY_SERVER"
API_KEY_ENV_VAR = "DPLY_API_KEY"

APP_NAME = "dply"
CONFIG_FILE_NAME = "dply.toml"
DELAYED_RUN_LOG_NAME = "delayed-runs.log"


def user_config_dir() -> Path:
    """``$XDG_CONFIG_HOME/dply`` (default ``~/.config/dply``), ``%APPDATA%/dply`` on Windows."""
    if is_windows():
        app_data = os.environ.get("APPDATA")
        if app_data:
            return Path(app_data) / APP_NAME
        return Path.home() / "AppData" / "Roaming" / APP_NAME

    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def delayed_run_log_path() -> Path:
    """File that collects the output of detached delayed runs."""
    return user_config_dir() / DELAYED_RUN_LOG_NAME


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Deployment server connection."""

    url: str | None = None
    api_key: str | None = None
    timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class DeployConfig:
    """Defaults for watching deployments."""

    timeout: float = DEFAULT_DEPLOYMENT_TIMEOUT_SECONDS
    poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS


def _duration(table: Mapping[str, object], key: str, default: float) -> float:
    raw = table.get(key)
    if raw is None:
        return default
    if isinstance(raw, bool) or not isinstance(raw, (int, float, str)):
        raise ValueError(f"{key}: expected a duration")
    if not isinstance(raw, str):
        if raw < 0:
            raise ValueError(f"{key}: duration must not be negative")
        return float(raw)
    parsed = parse_duration(raw)
    if isinstance(parsed, Err):
        raise ValueError(f"{key}: {parsed.error.message}")
    return parsed.value


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    server: ServerConfig = field(default_factory=ServerConfig)
    deploy: DeployConfig = field(default_factory=DeployConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: A value has the wrong type or an invalid duration.
        """
        server: StrDict = get_table(data, "server") or {}
        deploy: StrDict = get_table(data, "deploy") or {}

        return cls(
            server=ServerConfig(
                url=get_str(server, "url"),
                api_key=get_str(server, "api_key"),
                timeout=get_number(server, "timeout") or DEFAULT_HTTP_TIMEOUT_SECONDS,
            ),
            deploy=DeployConfig(
                timeout=_duration(deploy, "timeout", DEFAULT_DEPLOYMENT_TIMEOUT_SECONDS),
                poll_interval=_duration(deploy, "poll_interval", DEFAULT_POLL_INTERVAL_SECONDS),
            ),
        )

    def with_environment(self, environ: Mapping[str, str] | None = None) -> Config:
        """Return a copy with ``DPLY_SERVER`` / ``DPLY_API_KEY`` applied."""
        env = os.environ if environ is None else environ
        url = (env.get(SERVER_ENV_VAR) or "").strip() or self.server.url
        api_key = (env.get(API_KEY_ENV_VAR) or "").strip() or self.server.api_key
        return replace(self, server=replace(self.server, url=url, api_key=api_key))


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to the TOML file

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def default_config_paths(cwd: Path | None = None) -> list[Path]:
    base = cwd if cwd is not None else Path.cwd()
    return [base / CONFIG_FILE_NAME, user_config_dir() / "config.toml"]


def find_config(
    explicit: Path | None = None,
    *,
    cwd: Path | None = None,
) -> Result[Config, ConfigError]:
    """Load the explicit config file, else the first default one that exists.

    An explicit path must exist. When no default file exists the built-in
    defaults are used.
    """
    if explicit is not None:
        return load_config(explicit.expanduser())

    for candidate in default_config_paths(cwd):
        if candidate.is_file():
            return load_config(candidate)
    return Ok(Config())
