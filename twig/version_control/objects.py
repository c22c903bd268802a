"""
Object model for version control.

Defines blobs, the parent variants of a commit, and the immutable commit
record whose identity is derived from all of its content.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence, Tuple, Union
import hashlib
import json

from .errors import CorruptedObjectError

INITIAL_TIMESTAMP = datetime(1970, 1, 1, tzinfo=timezone.utc).isoformat()


def hash_blob(content: bytes, file_name: str) -> str:
    """Compute the id of a blob from its content followed by its file name."""
    return hashlib.sha1(content + file_name.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class Blob:
    """
    Snapshot of one file's content at the time it was added.

    Attributes:
        file_name: Name of the file in the working tree
        content: Raw file bytes
    """

    file_name: str
    content: bytes

    @property
    def blob_id(self) -> str:
        return hash_blob(self.content, self.file_name)


@dataclass(frozen=True)
class RootParents:
    """Parents of the initial commit (there are none)."""

    @property
    def ids(self) -> Tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class LinearParents:
    """Parents of an ordinary commit."""

    first: str

    @property
    def ids(self) -> Tuple[str, ...]:
        return (self.first,)


@dataclass(frozen=True)
class MergeParents:
    """Parents of a merge commit: the merged-into tip, then the merged-in tip."""

    first: str
    second: str

    @property
    def ids(self) -> Tuple[str, ...]:
        return (self.first, self.second)


Parents = Union[RootParents, LinearParents, MergeParents]


def parents_from_ids(ids: Sequence[str]) -> Parents:
    """Build the parent variant matching a list of parent ids."""
    if len(ids) == 0:
        return RootParents()
    if len(ids) == 1:
        return LinearParents(ids[0])
    if len(ids) == 2:
        return MergeParents(ids[0], ids[1])
    raise ValueError(f"A commit has at most two parents, got {len(ids)}")


@dataclass(frozen=True)
class Commit:
    """
    Represents a commit in the version history.

    A commit is an immutable snapshot of the tracked file mapping. Its id is
    computed once, at construction, from the message, timestamp, parents
    and file mapping, and never changes afterwards.
    """

    message: str
    timestamp: str
    parents: Parents
    files: Dict[str, str] = field(default_factory=dict)
    commit_id: str = field(init=False)

    def __post_init__(self) -> None:
        if not self.message:
            raise ValueError("Commit message must not be empty")
        object.__setattr__(self, "files", dict(sorted(self.files.items())))
        object.__setattr__(self, "commit_id", self.compute_hash())

    def __hash__(self) -> int:
        return hash(self.commit_id)

    @property
    def parent_id(self) -> Optional[str]:
        """First parent id, or None for the root commit."""
        ids = self.parents.ids
        return ids[0] if ids else None

    @property
    def second_parent_id(self) -> Optional[str]:
        ids = self.parents.ids
        return ids[1] if len(ids) > 1 else None

    @property
    def is_root(self) -> bool:
        return isinstance(self.parents, RootParents)

    @property
    def is_merge(self) -> bool:
        return isinstance(self.parents, MergeParents)

    @property
    def created_at(self) -> datetime:
        return datetime.fromisoformat(self.timestamp)

    def compute_hash(self) -> str:
        """Compute the commit id over a canonical JSON rendering of its content."""
        payload = json.dumps(
            {
                "message": self.message,
                "timestamp": self.timestamp,
                "parents": list(self.parents.ids),
                "files": self.files,
            },
            sort_keys=True,
            separators=(",", ":"),
        )
        return hashlib.sha1(payload.encode("utf-8")).hexdigest()

    def to_dict(self) -> Dict[str, Any]:
        """Convert commit to dictionary for serialization."""
        return {
            "commit_id": self.commit_id,
            "message": self.message,
            "timestamp": self.timestamp,
            "parents": list(self.parents.ids),
            "files": dict(self.files),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Commit":
        """
        Create commit from dictionary.

        Raises:
            CorruptedObjectError: If the data is incomplete or its stored id
                does not match the id recomputed from its content
        """
        try:
            commit = cls(
                message=data["message"],
                timestamp=data["timestamp"],
                parents=parents_from_ids(data.get("parents", [])),
                files=data.get("files", {}),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise CorruptedObjectError(f"Malformed commit record: {e}") from e

        stored_id = data.get("commit_id")
        if stored_id is not None and stored_id != commit.commit_id:
            raise CorruptedObjectError(
                f"Commit {stored_id[:8]} does not match its content ({commit.commit_id[:8]})"
            )
        return commit

    def to_json(self) -> str:
        """Convert commit to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> "Commit":
        """Create commit from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise CorruptedObjectError(f"Commit record is not valid JSON: {e}") from e
        return cls.from_dict(data)


def create_initial_commit(message: str) -> Commit:
    """Create the root commit every repository starts from."""
    return Commit(
        message=message,
        timestamp=INITIAL_TIMESTAMP,
        parents=RootParents(),
    )
