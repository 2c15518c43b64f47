"""Custom exceptions for treefreeze.

This module defines typed exceptions for better error handling and clearer
error messages throughout the application. Everything the CLI reports as a
failed run derives from TreeFreezeError.
"""

from pathlib import Path
from typing import Union


class TreeFreezeError(RuntimeError):
    """Base class for all treefreeze errors."""
    pass


# Scan Errors
class MissingRootError(TreeFreezeError):
    """Scanned root does not exist or is not a directory."""

    def __init__(self, root: Union[str, Path], reason: str = "does not exist"):
        self.root = Path(root)
        super().__init__(
            f"Root directory '{root}' {reason}. "
            f"Pass --missing-ok to treat a missing root as an empty tree."
        )


# Snapshot Errors
class SnapshotError(TreeFreezeError):
    """Base class for snapshot storage errors."""
    pass


class SnapshotFormatError(SnapshotError):
    """Snapshot file is malformed and cannot be used as a baseline."""

    def __init__(self, path: Union[str, Path], line_no: int, reason: str):
        self.path = Path(path)
        self.line_no = line_no
        self.reason = reason
        super().__init__(
            f"Corrupted snapshot {self.path.name} (line {line_no}): {reason}"
        )


class SnapshotWriteError(SnapshotError):
    """Snapshot could not be written (directory uncreatable or unwritable)."""

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot write snapshot to {self.path}: {reason}")


class SnapshotNotFoundError(SnapshotError):
    """Requested snapshot does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No snapshot named '{name}'")


# Integrity Errors
class DigestAlgorithmMismatchError(TreeFreezeError):
    """Two fingerprint stores were built with different digest algorithms."""

    def __init__(self, before: str, after: str):
        self.before = before
        self.after = after
        super().__init__(
            f"Cannot compare fingerprints computed with '{before}' "
            f"against fingerprints computed with '{after}'"
        )


# Configuration Errors
class ConfigError(TreeFreezeError):
    """Configuration file is unreadable or invalid."""
    pass
