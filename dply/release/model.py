from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

# Package id -> required version. Built once, duplicates rejected at input time.
PackageVersionOverrides = Mapping[str, str]

TaskState = Literal[
    "queued",
    "executing",
    "cancelling",
    "success",
    "failed",
    "canceled",
    "timed_out",
]

TERMINAL_STATES: frozenset[TaskState] = frozenset({"success", "failed", "canceled", "timed_out"})


@dataclass(frozen=True, slots=True)
class Project:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class Environment:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class Step:
    """A deployment step; each step deploys exactly one package."""

    id: str
    description: str
    package_id: str


@dataclass(frozen=True, slots=True)
class SelectedPackage:
    step_id: str
    version: str


@dataclass(frozen=True, slots=True)
class Release:
    id: str
    version: str


@dataclass(frozen=True, slots=True)
class DeploymentTask:
    """A deployment of a release to one environment, tracked by a server task."""

    id: str
    task_id: str
    environment_id: str
    environment_name: str = ""

    @property
    def label(self) -> str:
        return self.environment_name or self.environment_id


def is_terminal(state: TaskState) -> bool:
    return state in TERMINAL_STATES
