"""
Working tree access and synchronization.

The working tree is the set of top-level regular files in the work
directory, excluding the repository directory itself.
"""

from pathlib import Path
from typing import Dict, Iterable, List

from twig.logging import get_twig_logger

from .errors import InvalidStateError, NotFoundError, UntrackedFileError
from .object_store import ObjectStore
from .objects import Commit, hash_blob

log = get_twig_logger("worktree")


class WorkingTree:
    """File-level read/write/delete capability over the work directory."""

    def __init__(self, root: Path, repo_dir_name: str = ".twig"):
        self.root = root
        self.repo_dir_name = repo_dir_name

    def is_trackable(self, name: str) -> bool:
        """Whether name is a plain top-level file name."""
        return (
            bool(name)
            and name not in (".", "..", self.repo_dir_name)
            and "/" not in name
            and "\\" not in name
        )

    def path(self, name: str) -> Path:
        """
        Map a file name to its path in the work directory.

        Raises:
            InvalidStateError: If name is not a plain top-level file name
        """
        if not self.is_trackable(name):
            raise InvalidStateError(f"Not a trackable file name: {name!r}")
        return self.root / name

    def list_files(self) -> List[str]:
        return sorted(
            entry.name
            for entry in self.root.iterdir()
            if entry.is_file() and self.is_trackable(entry.name)
        )

    def exists(self, name: str) -> bool:
        return self.path(name).is_file()

    def read(self, name: str) -> bytes:
        """
        Read a file's bytes.

        Raises:
            NotFoundError: If the file does not exist
        """
        path = self.path(name)
        if not path.is_file():
            raise NotFoundError("File does not exist.")
        return path.read_bytes()

    def write(self, name: str, content: bytes) -> None:
        self.path(name).write_bytes(content)

    def delete(self, name: str) -> bool:
        """Delete a file if present. Returns whether anything was removed."""
        path = self.path(name)
        if path.is_file():
            path.unlink()
            return True
        return False

    def blob_id(self, name: str) -> str:
        """Blob id the file would get if it were added now."""
        return hash_blob(self.read(name), name)


class WorkingTreeSynchronizer:
    """
    Materializes commits into the working tree.

    Destructive operations must call ensure_no_untracked() first so that
    user data unknown to the repository is never silently lost.
    """

    def __init__(self, tree: WorkingTree, objects: ObjectStore):
        self.tree = tree
        self.objects = objects

    def checkout_file(self, commit: Commit, name: str) -> None:
        """
        Overwrite (or create) a working file with its version in commit.

        Local edits to the file are discarded.

        Raises:
            NotFoundError: If commit does not track name
        """
        blob_id = commit.files.get(name)
        if blob_id is None:
            raise NotFoundError("File does not exist in that commit.")
        self.tree.write(name, self.objects.get_blob(blob_id))

    def checkout_commit(self, current: Commit, target: Commit) -> None:
        """
        Make the working tree match target.

        Files tracked by current but not by target are deleted; every file
        tracked by target is written. Files tracked by neither are left alone.
        """
        # Load every blob up front so a missing object fails before any write
        contents: Dict[str, bytes] = {
            name: self.objects.get_blob(blob_id) for name, blob_id in target.files.items()
        }

        removed = [name for name in current.files if name not in target.files]
        for name in removed:
            self.tree.delete(name)
        for name, content in contents.items():
            self.tree.write(name, content)

        log.info(
            f"Checked out {target.commit_id[:8]}",
            written=len(contents),
            removed=len(removed),
        )

    def untracked_files(self, known_blob_ids: Iterable[str]) -> List[str]:
        """
        Working files whose current content was never committed.

        Args:
            known_blob_ids: Every blob id recorded by any commit
        """
        known = set(known_blob_ids)
        return [name for name in self.tree.list_files() if self.tree.blob_id(name) not in known]

    def ensure_no_untracked(self, known_blob_ids: Iterable[str]) -> None:
        """
        Raises:
            UntrackedFileError: If any working file holds uncommitted content
        """
        untracked = self.untracked_files(known_blob_ids)
        if untracked:
            log.warning("Untracked files in the way", files=untracked)
            raise UntrackedFileError(untracked)
