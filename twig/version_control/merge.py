"""
Three-way merge of two branches.

The split point is the lowest common ancestor of the two tips, searched
over both parent edges. Each file is then resolved by comparing its blob
ids in the split point, the current tip and the given tip.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Set

from twig.config import MergeConfig
from twig.logging import get_twig_logger

from .errors import CorruptedObjectError, InvalidStateError
from .repository import Repository

log = get_twig_logger("merge")

ParentsOf = Callable[[str], Iterable[str]]


class FileAction(str, Enum):
    """Outcome of the three-way decision for one file."""

    KEEP = "keep"
    TAKE_OTHER = "take_other"
    REMOVE = "remove"
    CONFLICT = "conflict"


class MergeStatus(str, Enum):
    """How a merge request was carried out."""

    ANCESTOR = "ancestor"
    FAST_FORWARD = "fast_forward"
    MERGED = "merged"


@dataclass
class MergeResult:
    """
    Result of a merge.

    Attributes:
        status: Whether the merge was a no-op, a fast-forward or a real merge
        commit_id: Merge commit (MERGED) or new tip (FAST_FORWARD); None for ANCESTOR
        split_point: Lowest common ancestor of the two tips
        conflicts: Names of files written with conflict markers
    """

    status: MergeStatus
    commit_id: Optional[str]
    split_point: str
    conflicts: List[str] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    @property
    def message(self) -> Optional[str]:
        """User-facing outcome line, if the outcome has one."""
        if self.status == MergeStatus.ANCESTOR:
            return "Given branch is an ancestor of the current branch."
        if self.status == MergeStatus.FAST_FORWARD:
            return "Current branch fast-forwarded."
        if self.conflicts:
            return "Encountered a merge conflict."
        return None


def resolve_file(
    split: Optional[str], current: Optional[str], other: Optional[str]
) -> FileAction:
    """
    Decide what happens to one file.

    Args:
        split: Blob id in the split point, or None if absent
        current: Blob id in the current tip, or None if absent
        other: Blob id in the given tip, or None if absent

    Returns:
        The action to apply to the working tree and staging area
    """
    if split is None:
        if other is None or other == current:
            return FileAction.KEEP
        if current is None:
            return FileAction.TAKE_OTHER
        return FileAction.CONFLICT

    if other == split:
        return FileAction.KEEP
    if current == split:
        return FileAction.REMOVE if other is None else FileAction.TAKE_OTHER
    if current == other:
        return FileAction.KEEP
    return FileAction.CONFLICT


def plan_merge(
    split_files: Dict[str, str],
    current_files: Dict[str, str],
    other_files: Dict[str, str],
) -> Dict[str, FileAction]:
    """Actions for every file that needs one, keyed by name in sorted order."""
    plan: Dict[str, FileAction] = {}
    for name in sorted(set(split_files) | set(current_files) | set(other_files)):
        action = resolve_file(
            split_files.get(name), current_files.get(name), other_files.get(name)
        )
        if action != FileAction.KEEP:
            plan[name] = action
    return plan


def _distances(parents_of: ParentsOf, start: str) -> Dict[str, int]:
    distances = {start: 0}
    queue = deque([start])
    while queue:
        current = queue.popleft()
        for parent_id in parents_of(current):
            if parent_id not in distances:
                distances[parent_id] = distances[current] + 1
                queue.append(parent_id)
    return distances


def find_split_point(parents_of: ParentsOf, a: str, b: str) -> Optional[str]:
    """
    Lowest common ancestor of two commits.

    Common ancestors that are proper ancestors of another common ancestor
    are discarded. Among the rest, the one with the fewest combined steps
    from both tips wins, then the smallest id.

    Args:
        parents_of: Callable returning the parent ids of a commit id
        a: First tip
        b: Second tip

    Returns:
        The split point id, or None if the tips share no history
    """
    from_a = _distances(parents_of, a)
    from_b = _distances(parents_of, b)
    common = set(from_a) & set(from_b)
    if not common:
        return None

    # Everything reachable from a common ancestor's parents is a proper ancestor
    dominated: Set[str] = set()
    queue = deque(parent for commit_id in common for parent in parents_of(commit_id))
    while queue:
        commit_id = queue.popleft()
        if commit_id in dominated:
            continue
        dominated.add(commit_id)
        queue.extend(parents_of(commit_id))

    candidates = common - dominated
    return min(candidates, key=lambda cid: (from_a[cid] + from_b[cid], cid))


def conflict_content(
    current: Optional[bytes], other: Optional[bytes], markers: MergeConfig
) -> bytes:
    """Build the content of a conflicted file from both sides."""

    def side(content: Optional[bytes]) -> bytes:
        if not content:
            return b""
        return content if content.endswith(b"\n") else content + b"\n"

    return b"".join(
        [
            markers.conflict_start.encode("utf-8") + b"\n",
            side(current),
            markers.conflict_separator.encode("utf-8") + b"\n",
            side(other),
            markers.conflict_end.encode("utf-8") + b"\n",
        ]
    )


class MergeEngine:
    """Merges a named branch into the current branch of a repository."""

    def __init__(self, repo: Repository):
        self.repo = repo

    def merge(self, branch_name: str) -> MergeResult:
        """
        Merge branch_name into the current branch.

        Raises:
            InvalidStateError: If changes are staged or branch_name is current
            NotFoundError: If the branch does not exist
            UntrackedFileError: If untracked files are in the way
        """
        repo = self.repo
        if not repo.staging.is_empty:
            raise InvalidStateError("You have uncommitted changes.")
        other_id = repo.refs.branch_tip(branch_name)
        current_branch = repo.refs.current_branch_name()
        if branch_name == current_branch:
            raise InvalidStateError("Cannot merge a branch with itself.")
        repo.ensure_no_untracked()

        head = repo.head()
        other = repo.graph.get(other_id)
        split_id = find_split_point(repo.graph.parent_ids, head.commit_id, other.commit_id)
        if split_id is None:
            raise CorruptedObjectError("Branches share no common history.")

        log.debug(
            f"Split point of {current_branch} and {branch_name} is {split_id[:8]}",
            head=head.commit_id,
            other=other.commit_id,
        )

        if split_id == other.commit_id:
            log.info(f"{branch_name} is already merged into {current_branch}")
            return MergeResult(MergeStatus.ANCESTOR, None, split_id)

        if split_id == head.commit_id:
            repo.move_to(other, current_branch)
            log.info(f"Fast-forwarded {current_branch} to {other.commit_id[:8]}")
            return MergeResult(MergeStatus.FAST_FORWARD, other.commit_id, split_id)

        split = repo.graph.get(split_id)
        plan = plan_merge(split.files, head.files, other.files)

        # Objects first: read every needed blob and store conflict results
        writes: Dict[str, bytes] = {}
        staged: Dict[str, str] = {}
        conflicts: List[str] = []
        for name, action in plan.items():
            if action == FileAction.TAKE_OTHER:
                writes[name] = repo.objects.get_blob(other.files[name])
                staged[name] = other.files[name]
            elif action == FileAction.CONFLICT:
                current_blob = head.files.get(name)
                other_blob = other.files.get(name)
                content = conflict_content(
                    repo.objects.get_blob(current_blob) if current_blob else None,
                    repo.objects.get_blob(other_blob) if other_blob else None,
                    repo.config.merge,
                )
                staged[name] = repo.objects.store_blob(name, content)
                writes[name] = content
                conflicts.append(name)

        # Then the working tree
        for name, action in plan.items():
            if action == FileAction.REMOVE:
                repo.tree.delete(name)
        for name, content in writes.items():
            repo.tree.write(name, content)

        # Then the index
        for name, action in plan.items():
            if action == FileAction.REMOVE:
                repo.staging.stage_removal(name, head.files[name])
        for name, blob_id in staged.items():
            repo.staging.stage_blob(name, blob_id)

        commit = repo.commit_staged(
            f"Merged {branch_name} into {current_branch}.",
            merge_parent=other.commit_id,
            allow_empty=True,
        )

        if conflicts:
            log.warning(f"Merge produced {len(conflicts)} conflict(s)", files=conflicts)
        log.info(
            f"Merged {branch_name} into {current_branch}",
            merge_commit=commit.commit_id,
            actions=len(plan),
        )
        return MergeResult(MergeStatus.MERGED, commit.commit_id, split_id, conflicts)
