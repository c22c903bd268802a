"""
Diff computation for comparing file mappings.

Compares two name -> blob id mappings by hash equality only; no line-level
diffing is performed.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class ChangeType(str, Enum):
    """Type of change in a diff."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


@dataclass
class FileChange:
    """Represents a change to a single file."""

    name: str
    change_type: ChangeType
    old_blob: Optional[str]
    new_blob: Optional[str]


@dataclass
class FileMapDiff:
    """Complete diff between two file mappings."""

    changes: List[FileChange] = field(default_factory=list)

    def names(self, change_type: ChangeType) -> List[str]:
        return sorted(c.name for c in self.changes if c.change_type == change_type)


def compute_diff(old_files: Dict[str, str], new_files: Dict[str, str]) -> FileMapDiff:
    """
    Compute diff between two file mappings.

    Args:
        old_files: Old mapping of file name to blob id
        new_files: New mapping of file name to blob id

    Returns:
        FileMapDiff with one change per differing file, sorted by name
    """
    changes: List[FileChange] = []

    for name in sorted(set(old_files) | set(new_files)):
        old_blob = old_files.get(name)
        new_blob = new_files.get(name)

        if old_blob is None:
            change_type = ChangeType.ADDED
        elif new_blob is None:
            change_type = ChangeType.REMOVED
        elif old_blob != new_blob:
            change_type = ChangeType.MODIFIED
        else:
            continue

        changes.append(FileChange(name, change_type, old_blob, new_blob))

    return FileMapDiff(changes=changes)
