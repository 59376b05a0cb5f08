"""Operating system detection.

Only the distinctions ``dply`` acts on are modelled: config directory
location and how a detached process is started.
"""

from __future__ import annotations

import sys as _sys
from enum import Enum, auto
from functools import lru_cache

__all__ = ["Platform", "detect_platform", "is_windows"]


class Platform(Enum):
    """Operating system platform."""

    LINUX = auto()
    MACOS = auto()
    WINDOWS = auto()
    UNKNOWN = auto()


@lru_cache(maxsize=1)
def detect_platform() -> Platform:
    if _sys.platform.startswith("win"):
        return Platform.WINDOWS
    if _sys.platform == "darwin":
        return Platform.MACOS
    if _sys.platform.startswith("linux"):
        return Platform.LINUX
    return Platform.UNKNOWN


def is_windows() -> bool:
    """Check if running on Windows."""
    return detect_platform() == Platform.WINDOWS
