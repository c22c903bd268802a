"""
Reference store: named branch pointers plus HEAD.

HEAD always names a branch; the checked-out commit is that branch's tip.
"""

import re
from typing import Dict, Optional

from twig.logging import get_twig_logger

from .errors import (
    AlreadyExistsError,
    CorruptedObjectError,
    InvalidStateError,
    NotFoundError,
)
from .storage import VersionStorage

log = get_twig_logger("refs")

_BRANCH_NAME_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9._-]*$")


def is_valid_branch_name(name: str) -> bool:
    return bool(_BRANCH_NAME_RE.match(name)) and not name.endswith(".lock")


def validate_branch_name(name: str) -> None:
    """Reject names that cannot be stored as a single reference file."""
    if not is_valid_branch_name(name):
        raise InvalidStateError(f"Invalid branch name: {name!r}")


class ReferenceStore:
    """Branch table and HEAD, persisted through VersionStorage."""

    def __init__(self, storage: VersionStorage):
        self.storage = storage

    def current_branch_name(self) -> str:
        name = self.storage.get_current_branch()
        if name is None:
            raise CorruptedObjectError("HEAD does not name a branch.")
        return name

    def head_commit_id(self) -> str:
        """Id of the commit at the tip of the current branch."""
        name = self.current_branch_name()
        commit_id = self.storage.load_branch(name)
        if commit_id is None:
            raise CorruptedObjectError(f"HEAD names missing branch {name!r}.")
        return commit_id

    def branches(self) -> Dict[str, str]:
        """Mapping of every branch name to its tip commit id."""
        result: Dict[str, str] = {}
        for name in self.storage.list_branches():
            tip = self.storage.load_branch(name)
            if tip is not None:
                result[name] = tip
        return result

    def has_branch(self, name: str) -> bool:
        if not is_valid_branch_name(name):
            return False
        return self.storage.load_branch(name) is not None

    def branch_tip(self, name: str) -> str:
        """
        Get a branch's tip.

        Raises:
            NotFoundError: If the branch does not exist
        """
        tip = self.storage.load_branch(name) if is_valid_branch_name(name) else None
        if tip is None:
            raise NotFoundError("A branch with that name does not exist.")
        return tip

    def set_head(self, commit_id: str, branch_name: str) -> None:
        """Point branch_name at commit_id and attach HEAD to it."""
        self.storage.save_branch(branch_name, commit_id)
        self.storage.set_head(branch_name)
        log.info(f"HEAD -> {branch_name} at {commit_id[:8]}")

    def create_branch(self, name: str, commit_id: Optional[str] = None) -> str:
        """
        Create a branch at commit_id, or at HEAD's commit by default.

        Raises:
            AlreadyExistsError: If the name is taken
            InvalidStateError: If the name is not a valid branch name
        """
        validate_branch_name(name)
        if self.has_branch(name):
            raise AlreadyExistsError("A branch with that name already exists.")

        target = commit_id or self.head_commit_id()
        self.storage.save_branch(name, target)
        log.info(f"Created branch: {name} at {target[:8]}")
        return target

    def delete_branch(self, name: str) -> None:
        """
        Delete a branch pointer. Commits it pointed to are kept.

        Raises:
            InvalidStateError: If name is the current branch
            NotFoundError: If the branch does not exist
        """
        if not is_valid_branch_name(name):
            raise NotFoundError("A branch with that name does not exist.")
        if name == self.current_branch_name():
            raise InvalidStateError("Cannot remove the current branch.")
        if not self.storage.delete_branch(name):
            raise NotFoundError("A branch with that name does not exist.")
        log.info(f"Deleted branch: {name}")

    def advance_branch(self, name: str, commit_id: str) -> None:
        """
        Move an existing branch to commit_id.

        Raises:
            NotFoundError: If the branch does not exist
        """
        self.branch_tip(name)
        self.storage.save_branch(name, commit_id)
        log.debug(f"Branch {name} -> {commit_id[:8]}")
