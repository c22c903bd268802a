"""
Version control facade.

Provides one operation per user-facing verb. Every operation returns a
result or raises a VersionControlError subclass; nothing prints or exits.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from twig.config import Config, config as default_config
from twig.logging import performance_monitor, track_operation

from .diff import ChangeType, compute_diff
from .errors import InvalidStateError, NotFoundError
from .merge import MergeEngine, MergeResult
from .objects import Commit
from .repository import Clock, Repository, utc_now


@dataclass
class RepositoryStatus:
    """
    Snapshot of the repository for display.

    Attributes:
        current_branch: Branch HEAD is attached to
        branches: Every branch name, sorted
        staged: Files staged for addition
        removed: Files staged for removal
        modified: Tracked or staged files whose working copy differs,
            as "name (modified)" or "name (deleted)"
        untracked: Working files that are neither tracked nor staged
    """

    current_branch: str
    branches: List[str] = field(default_factory=list)
    staged: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    modified: List[str] = field(default_factory=list)
    untracked: List[str] = field(default_factory=list)


class VersionControl:
    """
    Git-like version control over a flat working directory.

    Provides operations for:
    - Staging and committing files
    - Restoring files from commits
    - Branching, resetting and merging
    - Inspecting history and status
    """

    def __init__(
        self,
        work_dir: Path = Path("."),
        config: Optional[Config] = None,
        clock: Clock = utc_now,
    ):
        """
        Initialize version control.

        Args:
            work_dir: Working directory holding the tracked files
            config: Configuration (default: the module-level config)
            clock: Source of aware commit timestamps
        """
        self.work_dir = Path(work_dir)
        self.config = config or default_config
        self.clock = clock
        self._repo: Optional[Repository] = None

    @property
    def repo(self) -> Repository:
        """
        Raises:
            RepositoryNotInitializedError: If work_dir holds no repository
        """
        if self._repo is None:
            self._repo = Repository.open(self.work_dir, self.config, self.clock)
        return self._repo

    @track_operation("init")
    def init(self) -> str:
        """
        Create a repository with its root commit.

        Returns:
            Root commit ID

        Example:
            >>> vc = VersionControl(Path("project"))
            >>> root_id = vc.init()
        """
        self._repo = Repository.initialize(self.work_dir, self.config, self.clock)
        return self._repo.head().commit_id

    @track_operation("add", component="staging")
    def add(self, name: str) -> Optional[str]:
        """
        Stage a file for the next commit.

        Returns:
            The staged blob id, or None if nothing needed staging
        """
        repo = self.repo
        return repo.staging.stage_add(name, repo.head())

    @track_operation("remove", component="staging")
    def remove(self, name: str) -> None:
        """Untrack a file, deleting it from the working tree if it is tracked."""
        repo = self.repo
        repo.staging.stage_remove(name, repo.head())

    @track_operation("commit")
    def commit(self, message: str) -> str:
        """
        Commit the staged changes.

        Returns:
            Commit ID

        Example:
            >>> vc.add("notes.txt")
            >>> commit_id = vc.commit("Add notes")
        """
        return self.repo.commit_staged(message).commit_id

    @track_operation("checkout_file", component="worktree")
    def checkout_file(self, name: str) -> None:
        """Restore a file to its version in the current commit."""
        repo = self.repo
        repo.sync.checkout_file(repo.head(), name)

    @track_operation("checkout_commit_file", component="worktree")
    def checkout_commit_file(self, commit_id: str, name: str) -> None:
        """
        Restore a file to its version in another commit.

        HEAD and the staging area are left unchanged.
        """
        repo = self.repo
        repo.sync.checkout_file(repo.graph.resolve(commit_id), name)

    @track_operation("checkout_branch", component="worktree")
    def checkout_branch(self, name: str) -> None:
        """
        Switch to another branch, replacing the working tree with its tip.

        Raises:
            NotFoundError: If the branch does not exist
            InvalidStateError: If it is already the current branch
            UntrackedFileError: If untracked files are in the way
        """
        repo = self.repo
        if not repo.refs.has_branch(name):
            raise NotFoundError("No such branch exists.")
        if name == repo.refs.current_branch_name():
            raise InvalidStateError("No need to checkout the current branch.")
        repo.ensure_no_untracked()

        repo.move_to(repo.graph.get(repo.refs.branch_tip(name)), name)

    def log(self) -> List[Commit]:
        """First-parent history from HEAD back to the root commit."""
        repo = self.repo
        return list(repo.graph.ancestors_of(repo.head()))

    @performance_monitor(threshold_ms=1000)
    def global_log(self) -> List[Commit]:
        """Every commit ever made, in id order."""
        return self.repo.graph.all_commits()

    def find(self, message: str) -> List[str]:
        """Ids of the commits with exactly this message; empty if none."""
        return self.repo.graph.find(message)

    @track_operation("branch", component="refs")
    def branch(self, name: str) -> str:
        """
        Create a branch at the current commit without switching to it.

        Returns:
            Commit ID the branch points at
        """
        return self.repo.refs.create_branch(name)

    @track_operation("remove_branch", component="refs")
    def remove_branch(self, name: str) -> None:
        """Delete a branch pointer; its commits are kept."""
        self.repo.refs.delete_branch(name)

    @track_operation("reset")
    def reset(self, commit_id: str) -> str:
        """
        Move the current branch to a commit and check it out.

        Args:
            commit_id: Full id or unique prefix

        Returns:
            The resolved commit ID

        Raises:
            AmbiguousCommitError: If commit_id does not resolve to one commit
            UntrackedFileError: If untracked files are in the way
        """
        repo = self.repo
        target = repo.graph.resolve(commit_id)
        repo.ensure_no_untracked()
        repo.move_to(target, repo.refs.current_branch_name())
        return target.commit_id

    @track_operation("merge", component="merge")
    def merge(self, branch_name: str) -> MergeResult:
        """
        Merge a branch into the current branch.

        Example:
            >>> result = vc.merge("feature")
            >>> result.conflicts
            []
        """
        return MergeEngine(self.repo).merge(branch_name)

    @performance_monitor(threshold_ms=1000)
    def status(self) -> RepositoryStatus:
        """Branches, staged changes and working-tree differences."""
        repo = self.repo
        head = repo.head()
        staging = repo.staging

        expected = staging.reconcile_into(head.files)
        working = {name: repo.tree.blob_id(name) for name in repo.tree.list_files()}
        diff = compute_diff(expected, working)

        modified = [f"{name} (modified)" for name in diff.names(ChangeType.MODIFIED)]
        modified += [f"{name} (deleted)" for name in diff.names(ChangeType.REMOVED)]

        return RepositoryStatus(
            current_branch=repo.refs.current_branch_name(),
            branches=sorted(repo.refs.branches()),
            staged=staging.staged_files,
            removed=staging.removed_files,
            modified=sorted(modified),
            untracked=diff.names(ChangeType.ADDED),
        )
