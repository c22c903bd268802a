"""
Content-addressed object store.

Blobs are keyed by the hash of their content and file name, commits by
their own computed id. Writes are idempotent.
"""

from pathlib import Path
from typing import Iterator, List

from twig.logging import get_twig_logger

from .errors import NotFoundError
from .objects import Blob, Commit
from .storage import VersionStorage

log = get_twig_logger("objects")


class ObjectStore:
    """Persistence for blobs and commits on top of VersionStorage."""

    def __init__(self, storage: VersionStorage):
        self.storage = storage

    def put_blob(self, path: Path) -> str:
        """
        Snapshot a working-tree file as a blob.

        Args:
            path: File to read; its name becomes part of the blob id

        Returns:
            Blob id
        """
        return self.store_blob(path.name, path.read_bytes())

    def store_blob(self, file_name: str, content: bytes) -> str:
        """Store in-memory content as the blob for file_name and return its id."""
        blob = Blob(file_name=file_name, content=content)
        if self.storage.save_blob(blob.blob_id, blob.content):
            log.debug(
                f"Stored blob {blob.blob_id[:8]}", file_name=file_name, size=len(content)
            )
        return blob.blob_id

    def get_blob(self, blob_id: str) -> bytes:
        """
        Load blob content.

        Raises:
            NotFoundError: If no blob has that id
        """
        content = self.storage.load_blob(blob_id)
        if content is None:
            raise NotFoundError(f"No blob with id {blob_id} exists.")
        return content

    def has_blob(self, blob_id: str) -> bool:
        return self.storage.has_blob(blob_id)

    def put_commit(self, commit: Commit) -> str:
        self.storage.save_commit(commit)
        log.debug(f"Stored commit {commit.commit_id[:8]}", message=commit.message)
        return commit.commit_id

    def get_commit(self, commit_id: str) -> Commit:
        """
        Load a commit.

        Raises:
            NotFoundError: If no commit has that id
        """
        commit = self.storage.load_commit(commit_id)
        if commit is None:
            raise NotFoundError("No commit with that id exists.")
        return commit

    def has_commit(self, commit_id: str) -> bool:
        return (self.storage.commits_dir / f"{commit_id}.json").is_file()

    def commit_ids(self) -> List[str]:
        return self.storage.list_commits()

    def iter_commits(self) -> Iterator[Commit]:
        for commit_id in self.commit_ids():
            yield self.get_commit(commit_id)
