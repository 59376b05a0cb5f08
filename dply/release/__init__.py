"""Release workflow.

- model / settings: records and the immutable run input
- semver, overrides, resolver, version_select: input resolution rules
- flow: orchestration of one create-release run
- watcher: deployment completion polling
- schedule: delayed / detached execution
"""

from __future__ import annotations
