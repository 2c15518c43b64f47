"""Diff computation logic - stable module for computing differences."""

from .core import DiffResult, FingerprintStore
from .errors import DigestAlgorithmMismatchError


def compute_diff(before: FingerprintStore, after: FingerprintStore) -> DiffResult:
    """
    Classify the differences between two fingerprint stores.

    Args:
        before: Baseline fingerprints (usually the latest snapshot).
        after: Current fingerprints (usually a fresh scan).

    Returns:
        DiffResult whose lists are each sorted lexicographically:
        - modified: in both, digests differ
        - deleted: only in before
        - added: only in after
        Paths with identical digests produce no record.

    Raises:
        DigestAlgorithmMismatchError: If the stores use different algorithms.

    Note:
        Pure function - neither store is modified.
    """
    if before.algorithm != after.algorithm:
        raise DigestAlgorithmMismatchError(before.algorithm, after.algorithm)

    before_paths = set(before.files)
    after_paths = set(after.files)

    modified = [
        path for path in before_paths & after_paths
        if before.files[path] != after.files[path]
    ]

    return DiffResult(
        modified=sorted(modified),
        deleted=sorted(before_paths - after_paths),
        added=sorted(after_paths - before_paths),
    )
