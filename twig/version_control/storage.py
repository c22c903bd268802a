"""
Storage backend for version control system.

Handles persistence of blobs, commits, references and the index to disk.
"""

import json
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from .errors import CorruptedObjectError, InvalidStateError
from .objects import Commit

HEAD_REF_PREFIX = "ref: refs/heads/"


class VersionStorage:
    """
    File-based storage for version control.

    Stores objects and references in a directory structure:
    - .twig/
      - objects/
        - blobs/
          - {blob_id}  (raw file bytes)
        - commits/
          - {commit_id}.json
      - refs/
        - heads/
          - {branch_name}  (contains commit_id)
      - HEAD  (contains "ref: refs/heads/{branch_name}")
      - index.json  (pending additions and removals)
    """

    def __init__(self, base_dir: Path = Path(".twig")):
        """
        Initialize storage.

        Args:
            base_dir: Base directory for version control storage
        """
        self.base_dir = base_dir
        self.objects_dir = self.base_dir / "objects"
        self.blobs_dir = self.objects_dir / "blobs"
        self.commits_dir = self.objects_dir / "commits"
        self.refs_dir = self.base_dir / "refs"
        self.heads_dir = self.refs_dir / "heads"
        self.head_file = self.base_dir / "HEAD"
        self.index_file = self.base_dir / "index.json"

    def exists(self) -> bool:
        """Check whether a repository has been initialized here."""
        return self.head_file.exists()

    def initialize(self) -> None:
        """Create all necessary directories."""
        self.blobs_dir.mkdir(parents=True, exist_ok=True)
        self.commits_dir.mkdir(parents=True, exist_ok=True)
        self.heads_dir.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def _atomic_write(self, filepath: Path, mode: str = "w") -> Iterator:
        """
        Context manager for atomic file write operations.

        Args:
            filepath: Target file path
            mode: "w" for text, "wb" for bytes

        Yields:
            File object for writing
        """
        temp_fd, temp_path = tempfile.mkstemp(
            dir=filepath.parent, prefix=f".{filepath.name}.", suffix=".tmp"
        )

        try:
            with os.fdopen(temp_fd, mode) as f:
                yield f

            # Atomic rename
            os.replace(temp_path, filepath)

        except Exception:
            try:
                os.unlink(temp_path)
            except FileNotFoundError:
                pass
            raise

    def save_blob(self, blob_id: str, content: bytes) -> bool:
        """
        Save blob content unless it is already stored.

        Returns:
            True if the blob was written, False if it already existed
        """
        blob_file = self.blobs_dir / blob_id
        if blob_file.exists():
            return False

        with self._atomic_write(blob_file, "wb") as f:
            f.write(content)
        return True

    def load_blob(self, blob_id: str) -> Optional[bytes]:
        """
        Load blob content.

        Returns:
            Content if found, None otherwise
        """
        blob_file = self.blobs_dir / blob_id
        if not blob_file.is_file():
            return None
        return blob_file.read_bytes()

    def has_blob(self, blob_id: str) -> bool:
        return (self.blobs_dir / blob_id).is_file()

    def save_commit(self, commit: Commit) -> None:
        """
        Save a commit to storage.

        Args:
            commit: Commit to save
        """
        commit_file = self.commits_dir / f"{commit.commit_id}.json"
        if commit_file.exists():
            return

        with self._atomic_write(commit_file) as f:
            f.write(commit.to_json())

    def load_commit(self, commit_id: str) -> Optional[Commit]:
        """
        Load a commit from storage.

        Args:
            commit_id: ID of commit to load

        Returns:
            Commit if found, None otherwise
        """
        commit_file = self.commits_dir / f"{commit_id}.json"
        if not commit_file.is_file():
            return None

        with open(commit_file, "r") as f:
            return Commit.from_json(f.read())

    def list_commits(self) -> List[str]:
        """
        List all commit IDs.

        Returns:
            Sorted list of commit IDs
        """
        return sorted(f.stem for f in self.commits_dir.glob("*.json"))

    def _branch_file(self, branch_name: str) -> Optional[Path]:
        """Path of a branch reference, or None if the name leaves heads/."""
        branch_file = self.heads_dir / branch_name
        if branch_file.parent != self.heads_dir or branch_file.name.startswith("."):
            return None
        return branch_file

    def save_branch(self, branch_name: str, commit_id: str) -> None:
        """
        Save a branch reference.

        Args:
            branch_name: Name of the branch
            commit_id: Commit ID the branch points to
        """
        branch_file = self._branch_file(branch_name)
        if branch_file is None:
            raise InvalidStateError(f"Invalid branch name: {branch_name!r}")
        with self._atomic_write(branch_file) as f:
            f.write(commit_id)

    def load_branch(self, branch_name: str) -> Optional[str]:
        """
        Load a branch reference.

        Args:
            branch_name: Name of the branch

        Returns:
            Commit ID if branch exists, None otherwise
        """
        branch_file = self._branch_file(branch_name)
        if branch_file is None or not branch_file.is_file():
            return None

        with open(branch_file, "r") as f:
            return f.read().strip()

    def list_branches(self) -> List[str]:
        """
        List all branches.

        Returns:
            Sorted list of branch names
        """
        return sorted(
            f.name
            for f in self.heads_dir.iterdir()
            if f.is_file() and not f.name.startswith(".")
        )

    def delete_branch(self, branch_name: str) -> bool:
        """
        Delete a branch.

        Args:
            branch_name: Name of branch to delete

        Returns:
            True if deleted, False if didn't exist
        """
        branch_file = self._branch_file(branch_name)
        if branch_file is not None and branch_file.is_file():
            branch_file.unlink()
            return True
        return False

    def get_head(self) -> Optional[str]:
        """
        Get current HEAD.

        Returns:
            HEAD reference (e.g., "ref: refs/heads/master")
        """
        if not self.head_file.exists():
            return None

        with open(self.head_file, "r") as f:
            return f.read().strip()

    def set_head(self, branch_name: str) -> None:
        """
        Attach HEAD to a branch.

        Args:
            branch_name: Name of the branch HEAD should name
        """
        with self._atomic_write(self.head_file) as f:
            f.write(f"{HEAD_REF_PREFIX}{branch_name}")

    def get_current_branch(self) -> Optional[str]:
        """
        Get name of current branch.

        Returns:
            Branch name, or None if HEAD is missing or malformed
        """
        head = self.get_head()
        if head and head.startswith(HEAD_REF_PREFIX):
            return head[len(HEAD_REF_PREFIX):]
        return None

    def load_index(self) -> Tuple[Dict[str, str], Dict[str, str]]:
        """
        Load the staging area.

        Returns:
            (additions, removals), both mapping file name to blob id
        """
        if not self.index_file.exists():
            return {}, {}

        try:
            with open(self.index_file, "r") as f:
                data = json.load(f)
            return dict(data["additions"]), dict(data["removals"])
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise CorruptedObjectError(f"Index file is corrupted: {e}") from e

    def save_index(self, additions: Dict[str, str], removals: Dict[str, str]) -> None:
        """
        Save the staging area.

        Args:
            additions: File name to blob id staged for addition
            removals: File name to blob id staged for removal
        """
        with self._atomic_write(self.index_file) as f:
            json.dump(
                {"additions": additions, "removals": removals},
                f,
                indent=2,
                sort_keys=True,
            )
