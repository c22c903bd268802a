"""
Unit tests for branch references and HEAD.
"""

import tempfile
from pathlib import Path
from typing import Iterator

import pytest

from twig.config import Config
from twig.version_control.errors import (
    AlreadyExistsError,
    InvalidStateError,
    NotFoundError,
)
from twig.version_control.refs import validate_branch_name
from twig.version_control.repository import Repository


@pytest.fixture
def repo() -> Iterator[Repository]:
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Repository.initialize(Path(tmpdir), Config())


class TestBranchNames:
    """Tests for branch name validation."""

    @pytest.mark.parametrize("name", ["master", "feature-1", "fix_2", "v1.0", "_tmp"])
    def test_valid_names(self, name: str) -> None:
        validate_branch_name(name)

    @pytest.mark.parametrize("name", ["", "-x", ".hidden", "a/b", "a b", "x.lock"])
    def test_invalid_names(self, name: str) -> None:
        with pytest.raises(InvalidStateError):
            validate_branch_name(name)


class TestReferenceStore:
    """Tests for ReferenceStore."""

    def test_initial_head(self, repo: Repository) -> None:
        """Test that init attaches HEAD to master at the root commit."""
        assert repo.refs.current_branch_name() == "master"
        assert repo.refs.head_commit_id() == repo.head().commit_id
        assert repo.head().is_root

    def test_create_branch_at_head(self, repo: Repository) -> None:
        tip = repo.refs.create_branch("feature")
        assert tip == repo.refs.head_commit_id()
        assert repo.refs.branches() == {"feature": tip, "master": tip}
        assert repo.refs.current_branch_name() == "master"

    def test_create_existing_branch(self, repo: Repository) -> None:
        with pytest.raises(AlreadyExistsError, match="A branch with that name already exists."):
            repo.refs.create_branch("master")

    def test_delete_branch(self, repo: Repository) -> None:
        repo.refs.create_branch("feature")
        repo.refs.delete_branch("feature")
        assert not repo.refs.has_branch("feature")

    def test_delete_current_branch(self, repo: Repository) -> None:
        with pytest.raises(InvalidStateError, match="Cannot remove the current branch."):
            repo.refs.delete_branch("master")

    def test_delete_unknown_branch(self, repo: Repository) -> None:
        with pytest.raises(NotFoundError, match="A branch with that name does not exist."):
            repo.refs.delete_branch("nope")

    @pytest.mark.parametrize(
        "name", ["../../HEAD", "../../index.json", "../master", "", ".."]
    )
    def test_delete_branch_outside_heads(self, repo: Repository, name: str) -> None:
        """Test that names escaping the branch table are unknown branches."""
        repo.tree.write("a.txt", b"a")
        repo.staging.stage_add("a.txt", repo.head())

        with pytest.raises(NotFoundError, match="A branch with that name does not exist."):
            repo.refs.delete_branch(name)

        assert repo.storage.exists()
        assert repo.storage.index_file.is_file()
        assert repo.refs.current_branch_name() == "master"
        assert repo.refs.branches() == {"master": repo.head().commit_id}

    def test_branch_tip_unknown(self, repo: Repository) -> None:
        with pytest.raises(NotFoundError):
            repo.refs.branch_tip("nope")

    def test_lookup_outside_heads(self, repo: Repository) -> None:
        """Test that repository files are never read as branch tips."""
        assert not repo.refs.has_branch("../../HEAD")
        with pytest.raises(NotFoundError, match="A branch with that name does not exist."):
            repo.refs.branch_tip("../../HEAD")

    def test_set_head_switches_branch(self, repo: Repository) -> None:
        root_id = repo.refs.head_commit_id()
        repo.refs.set_head(root_id, "other")
        assert repo.refs.current_branch_name() == "other"
        assert repo.refs.branch_tip("other") == root_id

    def test_advance_unknown_branch(self, repo: Repository) -> None:
        with pytest.raises(NotFoundError):
            repo.refs.advance_branch("nope", repo.refs.head_commit_id())
