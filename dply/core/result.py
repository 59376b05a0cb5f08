"""Ok/Err result values.

Every operation that can fail for an expected reason (bad input, unknown
project, rejected release) returns ``Result[T, E]`` instead of raising, so the
CLI can render a message and pick an exit code without a traceback.

    parsed = parse_version("1.2.0")
    if isinstance(parsed, Err):
        return parsed
    version = parsed.value
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result holding ``value``."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed result holding ``error``."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Ok[T] | Err[E]
