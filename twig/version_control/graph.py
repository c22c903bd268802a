"""
Commit graph: the append-only DAG of commits.

Provides commit creation, first-parent history, reachability over both
parent edges, and id prefix resolution.
"""

import re
from collections import deque
from typing import Dict, Iterator, List, Set, Tuple

from .errors import AmbiguousCommitError, NotFoundError
from .object_store import ObjectStore
from .objects import Commit, Parents

_HEX_RE = re.compile(r"^[0-9a-f]+$")
FULL_ID_LENGTH = 40


class CommitGraph:
    """
    Read/append view over every commit in the object store.

    Commits are immutable, so loaded commits are cached for the lifetime
    of the graph.
    """

    def __init__(self, objects: ObjectStore, min_prefix_length: int = 8):
        self.objects = objects
        self.min_prefix_length = min_prefix_length
        self._cache: Dict[str, Commit] = {}

    def get(self, commit_id: str) -> Commit:
        """
        Load a commit by its full id.

        Raises:
            NotFoundError: If the commit does not exist
        """
        commit = self._cache.get(commit_id)
        if commit is None:
            commit = self.objects.get_commit(commit_id)
            self._cache[commit_id] = commit
        return commit

    def create_commit(
        self,
        message: str,
        timestamp: str,
        parents: Parents,
        files: Dict[str, str],
    ) -> Commit:
        """
        Create and persist a new commit.

        Args:
            message: Commit message
            timestamp: ISO-8601 timestamp
            parents: Parent variant; every parent must already exist
            files: Mapping of tracked file name to blob id

        Returns:
            The stored commit
        """
        for parent_id in parents.ids:
            self.get(parent_id)

        commit = Commit(message=message, timestamp=timestamp, parents=parents, files=files)
        self.objects.put_commit(commit)
        self._cache[commit.commit_id] = commit
        return commit

    def parent_ids(self, commit_id: str) -> Tuple[str, ...]:
        return self.get(commit_id).parents.ids

    def ancestors_of(self, commit: Commit) -> Iterator[Commit]:
        """
        Walk first-parent history, starting with the commit itself.

        Merged-in parents are not followed. The sequence ends at the root.
        """
        current = commit
        while True:
            yield current
            if current.parent_id is None:
                return
            current = self.get(current.parent_id)

    def is_reachable(self, from_id: str, to_id: str) -> bool:
        """Check whether to_id is from_id or one of its ancestors."""
        if from_id == to_id:
            return True
        seen = {from_id}
        queue = deque([from_id])
        while queue:
            for parent_id in self.parent_ids(queue.popleft()):
                if parent_id == to_id:
                    return True
                if parent_id not in seen:
                    seen.add(parent_id)
                    queue.append(parent_id)
        return False

    def resolve(self, ref: str) -> Commit:
        """
        Resolve a full commit id or a unique abbreviated prefix.

        Raises:
            AmbiguousCommitError: If the prefix is too short, malformed, or
                matches zero or several commits
        """
        ref = ref.strip().lower()
        if not _HEX_RE.match(ref) or len(ref) > FULL_ID_LENGTH:
            raise AmbiguousCommitError("No commit with that id exists.")

        if len(ref) == FULL_ID_LENGTH:
            try:
                return self.get(ref)
            except NotFoundError:
                raise AmbiguousCommitError("No commit with that id exists.") from None

        if len(ref) < self.min_prefix_length:
            raise AmbiguousCommitError(
                f"Commit id prefix must be at least {self.min_prefix_length} characters."
            )

        matches = [cid for cid in self.objects.commit_ids() if cid.startswith(ref)]
        if not matches:
            raise AmbiguousCommitError("No commit with that id exists.")
        if len(matches) > 1:
            raise AmbiguousCommitError(
                f"Commit id prefix {ref} is ambiguous ({len(matches)} matches)."
            )
        return self.get(matches[0])

    def all_commits(self) -> List[Commit]:
        return [self.get(cid) for cid in self.objects.commit_ids()]

    def find(self, message: str) -> List[str]:
        """Ids of every commit whose message equals message exactly."""
        return [c.commit_id for c in self.all_commits() if c.message == message]

    def known_blob_ids(self) -> Set[str]:
        """Every blob id recorded by any commit in the graph."""
        known: Set[str] = set()
        for commit in self.all_commits():
            known.update(commit.files.values())
        return known
