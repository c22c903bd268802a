"""
Integration tests for multi-branch workflows.

Each step goes through a fresh VersionControl instance so that every
piece of state has to survive a round trip through the repository
directory.
"""

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterator

import pytest

from twig.config import Config
from twig.version_control import (
    MergeStatus,
    UntrackedFileError,
    VersionControl,
    find_split_point,
)


class Workspace:
    """A working directory driven through short-lived VersionControl handles."""

    def __init__(self, root: Path):
        self.root = root
        self.now = datetime(2024, 6, 1, tzinfo=timezone.utc)

    def clock(self) -> datetime:
        self.now += timedelta(minutes=1)
        return self.now

    @property
    def vc(self) -> VersionControl:
        return VersionControl(self.root, config=Config(), clock=self.clock)

    def write(self, name: str, content: str) -> None:
        (self.root / name).write_text(content)

    def read(self, name: str) -> str:
        return (self.root / name).read_text()

    def exists(self, name: str) -> bool:
        return (self.root / name).exists()

    def commit(self, message: str, **files: str) -> str:
        for name, content in files.items():
            self.write(name, content)
            self.vc.add(name)
        return self.vc.commit(message)

    def head(self) -> str:
        return self.vc.log()[0].commit_id


@pytest.fixture
def ws() -> Iterator[Workspace]:
    with tempfile.TemporaryDirectory() as tmpdir:
        workspace = Workspace(Path(tmpdir))
        workspace.vc.init()
        yield workspace


class TestMergeWorkflow:
    """End-to-end merge scenarios."""

    def test_conflict_round_trip(self, ws: Workspace) -> None:
        ws.commit("base", **{"poem.txt": "roses are red\n"})
        ws.vc.branch("other")
        ws.commit("mine", **{"poem.txt": "roses are blue\n"})
        ws.vc.checkout_branch("other")
        ws.commit("theirs", **{"poem.txt": "roses are green\n"})
        other_tip = ws.head()
        ws.vc.checkout_branch("master")
        master_tip = ws.head()

        result = ws.vc.merge("other")

        assert result.status == MergeStatus.MERGED
        assert result.conflicts == ["poem.txt"]
        assert ws.read("poem.txt") == (
            "<<<<<<< HEAD\nroses are blue\n=======\nroses are green\n>>>>>>>\n"
        )
        merge_commit = ws.vc.log()[0]
        assert merge_commit.parents.ids == (master_tip, other_tip)
        assert ws.vc.status().staged == []

    def test_conflict_then_resolve(self, ws: Workspace) -> None:
        """Test that a conflicted file is clean after the merge and can be fixed."""
        ws.commit("base", **{"a.txt": "base"})
        ws.vc.branch("other")
        ws.commit("mine", **{"a.txt": "mine"})
        ws.vc.checkout_branch("other")
        ws.commit("theirs", **{"a.txt": "theirs"})
        ws.vc.checkout_branch("master")
        ws.vc.merge("other")

        assert ws.vc.status().modified == []
        ws.commit("resolve", **{"a.txt": "resolved"})
        assert ws.read("a.txt") == "resolved"

    def test_fast_forward(self, ws: Workspace) -> None:
        ws.vc.branch("feature")
        ws.vc.checkout_branch("feature")
        tip = ws.commit("feature work", **{"f.txt": "feature"})
        ws.vc.checkout_branch("master")
        commit_count = len(ws.vc.global_log())

        result = ws.vc.merge("feature")

        assert result.status == MergeStatus.FAST_FORWARD
        assert ws.head() == tip
        assert ws.read("f.txt") == "feature"
        assert len(ws.vc.global_log()) == commit_count

    def test_merge_after_intermediate_merge(self, ws: Workspace) -> None:
        """Test that a second merge uses the last merged commit as its split point."""
        ws.commit("base", **{"a.txt": "a0", "b.txt": "b0"})
        ws.vc.branch("feature")

        ws.vc.checkout_branch("feature")
        feature_1 = ws.commit("feature 1", **{"a.txt": "a1"})
        ws.vc.checkout_branch("master")
        ws.commit("master 1", **{"b.txt": "b1"})

        first = ws.vc.merge("feature")
        assert first.status == MergeStatus.MERGED
        assert first.conflicts == []

        ws.vc.checkout_branch("feature")
        ws.commit("feature 2", **{"a.txt": "a2"})
        ws.vc.checkout_branch("master")

        vc = ws.vc
        repo = vc.repo
        split = find_split_point(
            repo.graph.parent_ids,
            repo.refs.branch_tip("master"),
            repo.refs.branch_tip("feature"),
        )
        assert split == feature_1

        second = vc.merge("feature")
        assert second.status == MergeStatus.MERGED
        assert second.split_point == feature_1
        assert second.conflicts == []
        assert ws.read("a.txt") == "a2"
        assert ws.read("b.txt") == "b1"

    def test_merge_brings_new_files_and_removals(self, ws: Workspace) -> None:
        ws.commit("base", **{"keep.txt": "k", "drop.txt": "d"})
        ws.vc.branch("other")
        ws.commit("mine", **{"mine.txt": "m"})
        ws.vc.checkout_branch("other")
        ws.vc.remove("drop.txt")
        ws.commit("theirs", **{"theirs.txt": "t"})
        ws.vc.checkout_branch("master")

        ws.vc.merge("other")

        files = ws.vc.log()[0].files
        assert sorted(files) == ["keep.txt", "mine.txt", "theirs.txt"]
        assert not ws.exists("drop.txt")
        assert ws.read("theirs.txt") == "t"


class TestSafety:
    """Destructive operations never clobber unknown content."""

    def test_merge_blocked_by_untracked(self, ws: Workspace) -> None:
        ws.commit("base", **{"a.txt": "a"})
        ws.vc.branch("other")
        ws.vc.checkout_branch("other")
        ws.commit("theirs", **{"new.txt": "theirs"})
        ws.vc.checkout_branch("master")
        ws.commit("mine", **{"a.txt": "a2"})
        head = ws.head()

        ws.write("new.txt", "precious")
        with pytest.raises(UntrackedFileError):
            ws.vc.merge("other")

        assert ws.read("new.txt") == "precious"
        assert ws.head() == head
        assert ws.vc.status().staged == []

    def test_removal_round_trip(self, ws: Workspace) -> None:
        ws.commit("add", **{"a.txt": "a", "b.txt": "b"})
        ws.vc.remove("a.txt")
        ws.vc.commit("remove a")

        assert "a.txt" not in ws.vc.log()[0].files
        assert not ws.exists("a.txt")

        first = ws.vc.log()[1].commit_id
        ws.vc.checkout_commit_file(first, "a.txt")
        assert ws.read("a.txt") == "a"


class TestHistoryInvariants:
    """Graph-wide properties after a mixed sequence of operations."""

    def test_dag_monotonicity(self, ws: Workspace) -> None:
        ws.commit("base", **{"a.txt": "a"})
        ws.vc.branch("x")
        ws.commit("m1", **{"b.txt": "b"})
        ws.vc.checkout_branch("x")
        ws.commit("x1", **{"c.txt": "c"})
        ws.vc.checkout_branch("master")
        ws.vc.merge("x")

        vc = ws.vc
        repo = vc.repo
        root = [c for c in vc.global_log() if c.is_root]
        assert len(root) == 1

        for tip in repo.refs.branches().values():
            assert repo.graph.is_reachable(tip, tip)
        for commit in vc.global_log():
            assert repo.graph.is_reachable(commit.commit_id, root[0].commit_id)
            if not commit.is_root:
                assert len(commit.parents.ids) >= 1
                for parent_id in commit.parents.ids:
                    assert repo.objects.has_commit(parent_id)

    def test_ids_survive_reload(self, ws: Workspace) -> None:
        """Test that re-hydrated commits keep the ids they were created with."""
        ws.commit("one", **{"a.txt": "1"})
        ws.commit("two", **{"a.txt": "2"})

        for commit in ws.vc.global_log():
            assert commit.compute_hash() == commit.commit_id
