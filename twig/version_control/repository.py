"""
Repository handle.

Owns every component of one repository (storage, objects, graph, refs,
staging, working tree) and is passed explicitly to the operations that
need more than one of them.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from twig.config import Config
from twig.logging import get_twig_logger

from .errors import AlreadyExistsError, InvalidStateError, RepositoryNotInitializedError
from .graph import CommitGraph
from .object_store import ObjectStore
from .objects import Commit, LinearParents, MergeParents, Parents, create_initial_commit
from .refs import ReferenceStore, validate_branch_name
from .staging import StagingArea
from .storage import VersionStorage
from .worktree import WorkingTree, WorkingTreeSynchronizer

log = get_twig_logger("system")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Repository:
    """Explicit handle over one repository and its working tree."""

    def __init__(self, work_dir: Path, config: Config, clock: Clock = utc_now):
        self.work_dir = work_dir
        self.config = config
        self.clock = clock

        repo_config = config.repository
        self.storage = VersionStorage(work_dir / repo_config.repo_dir)
        self.objects = ObjectStore(self.storage)
        self.graph = CommitGraph(self.objects, repo_config.min_prefix_length)
        self.refs = ReferenceStore(self.storage)
        self.tree = WorkingTree(work_dir, repo_config.repo_dir)
        self.sync = WorkingTreeSynchronizer(self.tree, self.objects)
        self._staging: Optional[StagingArea] = None

    @classmethod
    def initialize(cls, work_dir: Path, config: Config, clock: Clock = utc_now) -> "Repository":
        """
        Create a repository with a root commit on the default branch.

        Raises:
            AlreadyExistsError: If a repository already exists in work_dir
        """
        repo = cls(work_dir, config, clock)
        if repo.storage.exists():
            raise AlreadyExistsError(
                "A Twig version-control system already exists in the current directory."
            )

        branch = config.repository.default_branch
        validate_branch_name(branch)

        repo.storage.initialize()
        root = create_initial_commit(config.repository.initial_message)
        repo.objects.put_commit(root)
        repo.staging.clear()
        repo.refs.set_head(root.commit_id, branch)

        log.bind(path=str(repo.storage.base_dir)).info(
            "Initialized repository", root=root.commit_id
        )
        return repo

    @classmethod
    def open(cls, work_dir: Path, config: Config, clock: Clock = utc_now) -> "Repository":
        """
        Open an existing repository.

        Raises:
            RepositoryNotInitializedError: If work_dir holds no repository
        """
        repo = cls(work_dir, config, clock)
        if not repo.storage.exists():
            raise RepositoryNotInitializedError("Not in an initialized Twig directory.")
        return repo

    @property
    def staging(self) -> StagingArea:
        if self._staging is None:
            self._staging = StagingArea(self.storage, self.objects, self.tree)
        return self._staging

    def head(self) -> Commit:
        """Commit currently checked out."""
        return self.graph.get(self.refs.head_commit_id())

    def now(self) -> str:
        timestamp = self.clock()
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return timestamp.isoformat()

    def ensure_no_untracked(self) -> None:
        """
        Raises:
            UntrackedFileError: If any working file holds never-committed content
        """
        self.sync.ensure_no_untracked(self.graph.known_blob_ids())

    def commit_staged(
        self,
        message: str,
        merge_parent: Optional[str] = None,
        allow_empty: bool = False,
    ) -> Commit:
        """
        Turn the staging area into a new commit on the current branch.

        Args:
            message: Commit message
            merge_parent: Tip of the merged-in branch, for merge commits
            allow_empty: Whether to commit with nothing staged

        Raises:
            InvalidStateError: If the message is blank or nothing is staged
        """
        if not message or not message.strip():
            raise InvalidStateError("Please enter a commit message.")
        if self.staging.is_empty and not allow_empty:
            raise InvalidStateError("No changes added to the commit.")

        branch = self.refs.current_branch_name()
        head = self.head()
        parents: Parents
        if merge_parent is not None:
            parents = MergeParents(head.commit_id, merge_parent)
        else:
            parents = LinearParents(head.commit_id)

        commit = self.graph.create_commit(
            message=message,
            timestamp=self.now(),
            parents=parents,
            files=self.staging.reconcile_into(head.files),
        )
        self.staging.clear()
        self.refs.advance_branch(branch, commit.commit_id)

        log.info(
            f"Committed {commit.commit_id[:8]}",
            commit_id=commit.commit_id,
            branch=branch,
        )
        return commit

    def move_to(self, target: Commit, branch_name: str) -> None:
        """
        Check out target, clear the staging area, and point branch_name and
        HEAD at it. Callers must run ensure_no_untracked() first.
        """
        self.sync.checkout_commit(self.head(), target)
        self.staging.clear()
        self.refs.set_head(target.commit_id, branch_name)
