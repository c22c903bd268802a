"""
Exception hierarchy for the version-control core.

Every failure surfaced to callers is a VersionControlError whose message
is a one-line, user-facing description.
"""

from typing import Iterable, List


class VersionControlError(Exception):
    """Base exception for version control errors."""

    pass


class NotFoundError(VersionControlError):
    """Raised when an object, commit, branch or file does not exist."""

    pass


class RepositoryNotInitializedError(NotFoundError):
    """Raised when an operation runs outside an initialized repository."""

    pass


class AlreadyExistsError(VersionControlError):
    """Raised on a branch name collision or a repeated init."""

    pass


class InvalidStateError(VersionControlError):
    """Raised when the repository is not in a state that allows the operation."""

    pass


class UntrackedFileError(VersionControlError):
    """Raised when an operation would overwrite or delete untracked files."""

    def __init__(self, file_names: Iterable[str]):
        self.file_names: List[str] = sorted(file_names)
        super().__init__(
            "There is an untracked file in the way; delete it, or add and commit it first."
        )


class AmbiguousCommitError(VersionControlError):
    """Raised when a commit id prefix matches zero or several commits."""

    pass


class CorruptedObjectError(VersionControlError):
    """Raised when a stored object cannot be decoded or fails verification."""

    pass
