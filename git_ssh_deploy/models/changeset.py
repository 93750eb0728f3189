"""Change set models"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple


class ChangeKind(Enum):
    """Path-level change between two revisions"""
    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"
    RENAMED = "R"


@dataclass(frozen=True)
class DiffEntry:
    """One entry of a name-status diff

    For renames, ``path`` is the old path and ``new_path`` the new one.
    """

    kind: ChangeKind
    path: str
    new_path: Optional[str] = None


@dataclass(frozen=True)
class ChangeSet:
    """Files to upload and files to remove on the remote side"""

    to_upload: Tuple[str, ...] = field(default_factory=tuple)
    to_remove: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        """Check if there is nothing to transfer or delete"""
        return not self.to_upload and not self.to_remove

    @property
    def counts(self) -> Tuple[int, int]:
        """Get (upload count, remove count)"""
        return len(self.to_upload), len(self.to_remove)

    @classmethod
    def from_paths(cls,
                   to_upload: Iterable[str] = (),
                   to_remove: Iterable[str] = ()) -> 'ChangeSet':
        """Create with both sets deduplicated and sorted"""
        return cls(
            to_upload=tuple(sorted(set(to_upload))),
            to_remove=tuple(sorted(set(to_remove))),
        )

    def to_dict(self) -> Dict[str, list]:
        """Convert to dictionary"""
        return {
            "to_upload": list(self.to_upload),
            "to_remove": list(self.to_remove),
        }
