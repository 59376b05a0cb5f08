"""Core types shared by every layer."""

from .config import Config, ConfigError, find_config, load_config
from .durations import DurationError, format_duration, parse_duration
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    # config
    "Config",
    "ConfigError",
    "find_config",
    "load_config",
    # durations
    "DurationError",
    "format_duration",
    "parse_duration",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
]
