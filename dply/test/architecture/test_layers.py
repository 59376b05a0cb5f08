from __future__ import annotations

from pathlib import Path

from ._gate import require_arch_checks_enabled
from ._utils import iter_python_files, matches_prefix, package_root, parse_imports

# package -> import prefixes it must not use
_RULES: dict[str, tuple[str, ...]] = {
    "core": ("dply.release", "dply.remote", "dply.cli", "typer", "rich"),
    "platform": ("dply.release", "dply.remote", "dply.cli", "typer", "rich"),
    "output": ("dply.release", "dply.remote", "dply.cli", "typer"),
    "release": ("dply.cli", "dply.remote.client", "dply.remote.http", "typer", "rich"),
    "remote": ("dply.cli", "typer", "rich"),
}


def _layer(rel_path: Path) -> str | None:
    if not rel_path.parts:
        return None
    head = rel_path.parts[0]
    return head if head in _RULES else None


def test_layers_only_depend_downwards() -> None:
    require_arch_checks_enabled()

    root = package_root()
    offenders: list[str] = []
    for file_path in iter_python_files(root):
        rel = file_path.relative_to(root)
        layer = _layer(rel)
        if layer is None:
            continue

        for item in parse_imports(file_path):
            if any(matches_prefix(item.module, prefix) for prefix in _RULES[layer]):
                offenders.append(
                    f"{rel}:{item.line}: forbidden import '{item.module}' in layer {layer}"
                )

    assert not offenders, "Layering violations:\n" + "\n".join(offenders)
