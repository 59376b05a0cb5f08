"""Process exit codes.

These values are the contract with whatever runs ``dply`` (CI pipelines,
schedulers) and must remain stable.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success
    - 1: User error (bad input, unknown project/environment/package)
    - 2: Environment error (no server configured, authentication refused)
    - 4: Network error (server unreachable, request rejected)
    - 5: I/O error (release notes file unreadable)
    - 6: A watched deployment finished unsuccessfully
    - 7: Watched deployments were still running when the watch timed out
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    NETWORK_ERROR = 4
    IO_ERROR = 5
    DEPLOYMENT_FAILED = 6
    DEPLOYMENT_UNFINISHED = 7
