from __future__ import annotations

import pytest

from dply.core.result import Err, Ok
from dply.release.overrides import build_overrides, parse_package_override


def test_parse_equals_and_colon_forms() -> None:
    assert parse_package_override("WebShop.Api=1.4.2") == Ok(("WebShop.Api", "1.4.2"))
    assert parse_package_override("WebShop.Api:1.4.2") == Ok(("WebShop.Api", "1.4.2"))
    assert parse_package_override(" WebShop.Api = 1.4.2 ") == Ok(("WebShop.Api", "1.4.2"))


@pytest.mark.parametrize("item", ["WebShop.Api", "=1.0.0", "WebShop.Api=", ""])
def test_parse_rejects_malformed(item: str) -> None:
    result = parse_package_override(item)
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_input"


def test_build_overrides() -> None:
    result = build_overrides(["A=1.0.0", "B=2.0.0"])
    assert result == Ok({"A": "1.0.0", "B": "2.0.0"})


@pytest.mark.parametrize(
    "items",
    [
        ["A=1.0.0", "A=2.0.0"],
        ["A=2.0.0", "A=1.0.0"],
        ["A=1.0.0", "A=1.0.0"],
    ],
)
def test_build_overrides_rejects_second_constraint_for_same_package(items: list[str]) -> None:
    result = build_overrides(items)
    assert isinstance(result, Err)
    assert result.error.kind == "duplicate_override"
    assert "A" in result.error.message
