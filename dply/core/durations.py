"""Duration parsing for command-line and config values.

Two spellings are accepted:

- timespan: ``[d.]hh:mm[:ss[.fff]]`` (``00:10:00``, ``1.02:00:00``)
- shorthand: ``90s``, ``10m``, ``2h``, ``1h30m``, ``1d`` (bare numbers are seconds)

Values are returned as float seconds, matching the ``*_SECONDS`` constants
used elsewhere.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

from .result import Err, Ok, Result

__all__ = ["DurationError", "format_duration", "parse_duration"]

_TIMESPAN_RE = re.compile(
    r"^(?:(?P<days>\d+)\.)?(?P<hours>\d{1,2}):(?P<minutes>\d{1,2})"
    r"(?::(?P<seconds>\d{1,2})(?:\.(?P<fraction>\d{1,7}))?)?$"
)
_SHORTHAND_RE = re.compile(r"(?P<value>\d+(?:\.\d+)?)(?P<unit>[dhms])")
_UNIT_SECONDS = {"d": 86400.0, "h": 3600.0, "m": 60.0, "s": 1.0}


@dataclass(frozen=True, slots=True)
class DurationError:
    """Error when a duration string cannot be parsed."""

    message: str
    value: str


def _parse_timespan(text: str) -> float | None:
    m = _TIMESPAN_RE.match(text)
    if m is None:
        return None
    hours = int(m.group("hours"))
    minutes = int(m.group("minutes"))
    seconds = int(m.group("seconds") or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        return None
    total = int(m.group("days") or 0) * 86400.0 + hours * 3600.0 + minutes * 60.0 + seconds
    fraction = m.group("fraction")
    if fraction:
        total += int(fraction) / (10 ** len(fraction))
    return total


def _parse_shorthand(text: str) -> float | None:
    try:
        number = float(text)
    except ValueError:
        pass
    else:
        return number if math.isfinite(number) else None

    pos = 0
    total = 0.0
    for m in _SHORTHAND_RE.finditer(text):
        if m.start() != pos:
            return None
        total += float(m.group("value")) * _UNIT_SECONDS[m.group("unit")]
        pos = m.end()
    if pos == 0 or pos != len(text):
        return None
    return total


def parse_duration(value: str) -> Result[float, DurationError]:
    """Parse ``value`` into seconds.

    Returns:
        Ok(seconds) on success, Err(DurationError) for malformed or negative input.
    """
    text = value.strip().lower()
    if not text:
        return Err(DurationError("empty duration", value=value))
    if text.startswith("-"):
        return Err(DurationError("duration must not be negative", value=value))

    seconds = _parse_timespan(text) if ":" in text else _parse_shorthand(text)
    if seconds is None:
        return Err(
            DurationError(
                "invalid duration (expected hh:mm:ss or a value like 90s, 10m, 1h30m)",
                value=value,
            )
        )
    return Ok(seconds)


def format_duration(seconds: float) -> str:
    """Format seconds as ``hh:mm:ss`` (days folded into hours)."""
    whole = int(round(seconds))
    hours, rest = divmod(whole, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
