"""Core data models for treefreeze.

A run compares two fingerprint stores:

1. before: loaded from the most recent snapshot (empty on the first run)
2. after: scanned from the tree as it is on disk now

The comparison yields a DiffResult, and the "after" store is persisted as
the next snapshot.
"""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .constants import DEFAULT_ALGORITHM


# ============= Fingerprints =============

class FingerprintStore(BaseModel):
    """Mapping of root-relative POSIX paths to raw content digests.

    Two stores are equal when they use the same algorithm and hold the
    same path -> digest mapping.
    """

    algorithm: str = DEFAULT_ALGORITHM
    files: Dict[str, bytes] = Field(default_factory=dict)

    def add(self, path: str, digest: bytes) -> None:
        """Record the digest for a path (replacing any previous one)."""
        self.files[path] = digest

    def get(self, path: str) -> Optional[bytes]:
        return self.files.get(path)

    @property
    def paths(self) -> List[str]:
        """All paths, sorted."""
        return sorted(self.files)

    def __len__(self) -> int:
        return len(self.files)

    def __contains__(self, path: object) -> bool:
        return path in self.files


class ScanError(BaseModel):
    """A single entry skipped during a scan."""

    path: str
    message: str


class ScanResult(BaseModel):
    """Fingerprints of a tree plus the per-entry failures recovered from."""

    store: FingerprintStore
    rehashed: Optional[FingerprintStore] = None  # same files, second algorithm
    errors: List[ScanError] = Field(default_factory=list)

    @property
    def complete(self) -> bool:
        """True if every entry was read successfully."""
        return not self.errors


# ============= Snapshots =============

class SnapshotRef(BaseModel):
    """Reference to a persisted snapshot file."""

    model_config = ConfigDict(frozen=True)

    path: Path
    timestamp: datetime
    sequence: int = 0  # Collision suffix, 0 when absent

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def sort_key(self) -> Tuple[datetime, int]:
        return (self.timestamp, self.sequence)


# ============= Change Detection =============

class ChangeType(str, Enum):
    """Type of change detected."""

    ADDED = "added"
    DELETED = "deleted"
    MODIFIED = "modified"


class FileChange(BaseModel):
    """Single file change."""

    path: str
    change_type: ChangeType


class DiffResult(BaseModel):
    """Result of comparing two fingerprint stores.

    Each list is sorted lexicographically.
    """

    modified: List[str] = Field(default_factory=list)
    deleted: List[str] = Field(default_factory=list)
    added: List[str] = Field(default_factory=list)

    @property
    def changes(self) -> List[FileChange]:
        """All change records: modified, then deleted, then added."""
        records = []
        for change_type, paths in (
            (ChangeType.MODIFIED, self.modified),
            (ChangeType.DELETED, self.deleted),
            (ChangeType.ADDED, self.added),
        ):
            records.extend(FileChange(path=p, change_type=change_type) for p in paths)
        return records

    @property
    def has_changes(self) -> bool:
        return bool(self.modified or self.deleted or self.added)

    @property
    def summary(self) -> Dict[ChangeType, int]:
        """Get summary counts by change type."""
        return {
            ChangeType.MODIFIED: len(self.modified),
            ChangeType.DELETED: len(self.deleted),
            ChangeType.ADDED: len(self.added),
        }

    def summary_text(self) -> str:
        """Get human-readable summary."""
        if not self.has_changes:
            return "No changes"
        parts = []
        if self.added:
            parts.append(f"{len(self.added)} added")
        if self.deleted:
            parts.append(f"{len(self.deleted)} deleted")
        if self.modified:
            parts.append(f"{len(self.modified)} modified")
        return ", ".join(parts)


# ============= Run Results =============

class FreezeResult(BaseModel):
    """Result of a completed freeze run."""

    diff: DiffResult
    snapshot: Optional[SnapshotRef] = None  # None for a dry run
    previous: Optional[SnapshotRef] = None  # None on the first run
    scan_errors: List[ScanError] = Field(default_factory=list)
    file_count: int = 0

    @property
    def first_run(self) -> bool:
        return self.previous is None
