"""
Staging area (index): pending additions and removals.

A file name appears in at most one of the two mappings. Every mutating
operation persists the index immediately.
"""

from typing import Dict, List, Optional

from twig.logging import get_twig_logger

from .errors import InvalidStateError, NotFoundError
from .object_store import ObjectStore
from .objects import Commit, hash_blob
from .storage import VersionStorage
from .worktree import WorkingTree

log = get_twig_logger("staging")


class StagingArea:
    """
    Pending change set reconciled into the next commit.

    Attributes:
        additions: File name -> blob id staged for addition
        removals: File name -> previously tracked blob id staged for removal
    """

    def __init__(self, storage: VersionStorage, objects: ObjectStore, tree: WorkingTree):
        self.storage = storage
        self.objects = objects
        self.tree = tree
        self.additions, self.removals = storage.load_index()

    @property
    def is_empty(self) -> bool:
        return not self.additions and not self.removals

    @property
    def staged_files(self) -> List[str]:
        return sorted(self.additions)

    @property
    def removed_files(self) -> List[str]:
        return sorted(self.removals)

    def save(self) -> None:
        self.storage.save_index(self.additions, self.removals)

    def stage_add(self, name: str, head: Commit) -> Optional[str]:
        """
        Stage the working-tree version of a file.

        A pending removal of the file is cancelled instead. Content identical
        to the version tracked by head is not staged.

        Args:
            name: File name in the working tree
            head: Commit currently checked out

        Returns:
            The staged blob id, or None if nothing was staged

        Raises:
            NotFoundError: If the file is not in the working tree
        """
        if not self.tree.exists(name):
            raise NotFoundError("File does not exist.")

        if name in self.removals:
            del self.removals[name]
            self.save()
            log.info(f"Unstaged removal of {name}")
            return None

        content = self.tree.read(name)
        blob_id = hash_blob(content, name)
        if head.files.get(name) == blob_id:
            if self.additions.pop(name, None) is not None:
                self.save()
            log.debug(f"{name} matches the current commit, nothing staged")
            return None

        self.objects.store_blob(name, content)
        self.additions[name] = blob_id
        self.save()
        log.info(f"Staged {name} ({blob_id[:8]})")
        return blob_id

    def stage_blob(self, name: str, blob_id: str) -> None:
        """Stage an already stored blob for addition under name."""
        self.removals.pop(name, None)
        self.additions[name] = blob_id
        self.save()

    def stage_removal(self, name: str, blob_id: str) -> None:
        """Stage name for removal from the next commit."""
        self.additions.pop(name, None)
        self.removals[name] = blob_id
        self.save()

    def stage_remove(self, name: str, head: Commit) -> None:
        """
        Untrack a file.

        If head tracks the file it is deleted from the working tree and staged
        for removal; if it is only staged for addition it is simply unstaged.

        Raises:
            InvalidStateError: If the file is neither tracked nor staged
        """
        if name in head.files:
            self.tree.delete(name)
            self.stage_removal(name, head.files[name])
            log.info(f"Staged removal of {name}")
        elif name in self.additions:
            del self.additions[name]
            self.save()
            log.info(f"Unstaged {name}")
        else:
            raise InvalidStateError("No reason to remove the file.")

    def reconcile_into(self, base_files: Dict[str, str]) -> Dict[str, str]:
        """
        Apply pending changes to a file mapping.

        Removals are dropped first, then additions are applied over the result.
        """
        files = {name: blob for name, blob in base_files.items() if name not in self.removals}
        files.update(self.additions)
        return files

    def clear(self) -> None:
        self.additions = {}
        self.removals = {}
        self.save()
