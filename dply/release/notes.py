from __future__ import annotations

from pathlib import Path

from dply.core.result import Err, Ok, Result
from dply.release.errors import ReleaseError


def resolve_release_notes(
    *,
    text: str | None,
    path: Path | None,
) -> Result[str | None, ReleaseError]:
    """Return release notes from literal text or a UTF-8 file (not both)."""
    if text is not None and path is not None:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message="--releasenotes and --releasenotesfile are mutually exclusive",
            )
        )

    if path is None:
        return Ok(text)

    try:
        return Ok(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        return Err(
            ReleaseError(
                kind="io_error",
                message=f"failed to read release notes file: {e}",
                hint=str(path),
            )
        )
