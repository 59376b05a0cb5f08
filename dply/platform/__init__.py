"""Platform abstraction layer."""

from .detection import Platform, detect_platform, is_windows
from .process import ProcessError, self_command, spawn_detached

__all__ = [
    # detection
    "Platform",
    "detect_platform",
    "is_windows",
    # process
    "ProcessError",
    "self_command",
    "spawn_detached",
]
