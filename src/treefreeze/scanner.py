"""Tree scanning with digest computation."""

from pathlib import Path, PurePath
from typing import List, Optional
import logging
import os
import stat

from .constants import DEFAULT_ALGORITHM
from .core import FingerprintStore, ScanError, ScanResult
from .errors import MissingRootError
from .hashing import compute_file_digests, new_hasher
from .ignore import IgnoreSpec, is_tool_path

logger = logging.getLogger(__name__)


def scan_tree(
    root: Path,
    *,
    ignore: Optional[IgnoreSpec] = None,
    algorithm: str = DEFAULT_ALGORITHM,
    rehash_with: Optional[str] = None,
    missing_ok: bool = False,
) -> ScanResult:
    """Fingerprint every regular file beneath ``root``.

    This is the expensive operation - reads and hashes every file.

    Keys are root-relative POSIX paths. The .treefreeze tool directory is
    never scanned; other exclusions come from ``ignore``. Symlinked
    directories are not followed.

    Entries that cannot be read are left out of the store and reported in
    ``ScanResult.errors``; they never abort the scan.

    Args:
        root: Directory to scan
        ignore: Optional ignore rules (paths relative to root)
        algorithm: Digest algorithm name
        rehash_with: Second algorithm to digest every file with in the same
            read; its fingerprints are returned as ScanResult.rehashed
        missing_ok: Return an empty store instead of raising when root is missing

    Raises:
        MissingRootError: If root is missing (and not missing_ok) or not a directory
        ValueError: If an algorithm is not supported
    """
    algorithms = [algorithm]
    rehashed = None
    if rehash_with is not None and rehash_with != algorithm:
        algorithms.append(rehash_with)
        rehashed = FingerprintStore(algorithm=rehash_with)
    for name in algorithms:
        new_hasher(name)  # fail fast on unsupported algorithms

    root = Path(root)
    store = FingerprintStore(algorithm=algorithm)
    errors: List[ScanError] = []

    if not root.exists():
        if missing_ok:
            logger.info("Root %s does not exist, treating it as empty", root)
            return ScanResult(store=store, rehashed=rehashed)
        raise MissingRootError(root)
    if not root.is_dir():
        raise MissingRootError(root, "is not a directory")

    def on_walk_error(exc: OSError) -> None:
        relpath = _relative_key(root, exc.filename) if exc.filename else "."
        logger.warning("Skipping unreadable directory %s: %s", relpath, exc.strerror or exc)
        errors.append(ScanError(path=relpath, message=str(exc)))

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_walk_error):
        rel_dir = _relative_key(root, dirpath)

        # Prune in place so ignored directories are never descended into
        dirnames[:] = sorted(
            d for d in dirnames
            if _should_traverse(_join_key(rel_dir, d), ignore)
        )

        for name in sorted(filenames):
            relpath = _join_key(rel_dir, name)
            if is_tool_path(relpath) or (ignore is not None and ignore.is_ignored(relpath)):
                continue

            full_path = Path(dirpath) / name
            try:
                mode = os.stat(full_path).st_mode
                if not stat.S_ISREG(mode):
                    logger.debug("Skipping non-regular file %s", relpath)
                    continue
                digests = compute_file_digests(full_path, algorithms)
                store.add(relpath, digests[algorithm])
                if rehashed is not None:
                    rehashed.add(relpath, digests[rehash_with])
            except OSError as e:
                logger.warning("Skipping unreadable file %s: %s", relpath, e.strerror or e)
                errors.append(ScanError(path=relpath, message=str(e)))

    logger.debug(
        "Scanned %s: %d files, %d skipped", root, len(store), len(errors)
    )
    return ScanResult(store=store, rehashed=rehashed, errors=errors)


def _relative_key(root: Path, path) -> str:
    """Root-relative POSIX key for a path under root ("" for root itself)."""
    rel = PurePath(os.path.relpath(path, root)).as_posix()
    return "" if rel == "." else rel


def _join_key(parent: str, name: str) -> str:
    return f"{parent}/{name}" if parent else name


def _should_traverse(rel_dir: str, ignore: Optional[IgnoreSpec]) -> bool:
    if is_tool_path(rel_dir):
        return False
    return ignore is None or ignore.should_traverse(rel_dir)
