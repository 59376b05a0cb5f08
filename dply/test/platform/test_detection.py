from __future__ import annotations

import pytest

from dply.platform import detection
from dply.platform.detection import Platform, detect_platform, is_windows


@pytest.fixture(autouse=True)
def _clear_cache() -> None:
    detect_platform.cache_clear()


@pytest.mark.parametrize(
    ("sys_platform", "expected"),
    [
        ("linux", Platform.LINUX),
        ("darwin", Platform.MACOS),
        ("win32", Platform.WINDOWS),
        ("sunos5", Platform.UNKNOWN),
    ],
)
def test_detect_platform(
    monkeypatch: pytest.MonkeyPatch, sys_platform: str, expected: Platform
) -> None:
    monkeypatch.setattr(detection._sys, "platform", sys_platform)

    assert detect_platform() == expected
    assert is_windows() is (expected == Platform.WINDOWS)
    detect_platform.cache_clear()
