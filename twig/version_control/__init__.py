"""
Version control core for Twig.

Provides git-like operations over a flat working directory: staging,
commits, branches, reset and three-way merge.
"""

from .objects import (
    Blob,
    Commit,
    RootParents,
    LinearParents,
    MergeParents,
    Parents,
    hash_blob,
    create_initial_commit,
)

from .errors import (
    VersionControlError,
    NotFoundError,
    RepositoryNotInitializedError,
    AlreadyExistsError,
    InvalidStateError,
    UntrackedFileError,
    AmbiguousCommitError,
    CorruptedObjectError,
)

from .diff import (
    FileMapDiff,
    FileChange,
    ChangeType,
    compute_diff,
)

from .merge import (
    FileAction,
    MergeEngine,
    MergeResult,
    MergeStatus,
    find_split_point,
    resolve_file,
)

from .repository import Repository

from .version_control import (
    VersionControl,
    RepositoryStatus,
)

from .storage import VersionStorage

__all__ = [
    # Objects
    "Blob",
    "Commit",
    "RootParents",
    "LinearParents",
    "MergeParents",
    "Parents",
    "hash_blob",
    "create_initial_commit",
    # Errors
    "VersionControlError",
    "NotFoundError",
    "RepositoryNotInitializedError",
    "AlreadyExistsError",
    "InvalidStateError",
    "UntrackedFileError",
    "AmbiguousCommitError",
    "CorruptedObjectError",
    # Diff
    "FileMapDiff",
    "FileChange",
    "ChangeType",
    "compute_diff",
    # Merge
    "FileAction",
    "MergeEngine",
    "MergeResult",
    "MergeStatus",
    "find_split_point",
    "resolve_file",
    # Version control
    "Repository",
    "VersionControl",
    "RepositoryStatus",
    # Storage
    "VersionStorage",
]
