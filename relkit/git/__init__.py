"""Git operations.

Usage:
    from relkit.git import Repository

    repo = Repository(component.local_path)
    if repo.tag_exists_locally("v1.2.3"):
        ...
"""

from relkit.git.repository import (
    ChangesSummary,
    GitError,
    GitOutput,
    GitStatus,
    Repository,
    StatusEntry,
)

__all__ = [
    "ChangesSummary",
    "GitError",
    "GitOutput",
    "GitStatus",
    "Repository",
    "StatusEntry",
]
