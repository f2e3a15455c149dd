"""Process exit codes used by the relkit CLI."""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    Values are part of the CLI contract and must remain stable:
    - 0: Success
    - 1: User error (bad input, failed release precondition)
    - 2: Environment error (no workspace, unreadable config)
    - 3: Step failed (at least one pipeline step reported failure)
    - 4: Structural error (invalid step graph)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    STEP_FAILED = 3
    GRAPH_ERROR = 4

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")
