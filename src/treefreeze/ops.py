"""Core operations for treefreeze."""

from typing import List
import logging

from .context import ProjectContext
from .core import DiffResult, FingerprintStore, FreezeResult, SnapshotRef
from .diffing import compute_diff
from .errors import MissingRootError, SnapshotNotFoundError, SnapshotWriteError
from .scanner import scan_tree
from .snapshot_store import (
    latest_snapshot,
    list_snapshots,
    load_snapshot,
    persist_snapshot,
)
from .utils import Clock, utc_now

logger = logging.getLogger(__name__)

# Snapshot names understood by resolve_snapshot besides file names
LATEST = "latest"
PREVIOUS = "previous"


def _check_root(ctx: ProjectContext) -> None:
    """Fail early on a missing root, before anything is created under it."""
    if not ctx.root.exists():
        if not ctx.missing_ok:
            raise MissingRootError(ctx.root)
    elif not ctx.root.is_dir():
        raise MissingRootError(ctx.root, "is not a directory")


def _ensure_snapshot_dir(ctx: ProjectContext) -> None:
    try:
        ctx.snapshot_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise SnapshotWriteError(ctx.snapshot_dir, e.strerror or str(e)) from e


# ============= Freeze Operation =============

def freeze(
    ctx: ProjectContext,
    *,
    dry_run: bool = False,
    clock: Clock = utc_now,
) -> FreezeResult:
    """Compare the tree against its latest snapshot and record a new one.

    Steps:
    1. Find and load the latest snapshot (empty baseline on the first run)
    2. Scan the tree
    3. Classify the differences
    4. Persist the scan as the new snapshot (skipped when dry_run)

    The baseline's digest algorithm is used for the comparison so runs stay
    comparable. If config.yaml asks for a different algorithm, every file is
    also digested with it during the same scan, and that store is persisted
    so later runs use the new one.

    Raises:
        MissingRootError: Root missing (unless ctx.missing_ok) or not a directory
        SnapshotFormatError: Latest snapshot is corrupted
        SnapshotWriteError: Snapshot directory cannot be created or written
        ConfigError: config.yaml or .treefreezeignore is unreadable or invalid
    """
    _check_root(ctx)
    config = ctx.get_config()
    ignore = ctx.get_ignore_spec()
    if not dry_run:
        _ensure_snapshot_dir(ctx)

    previous = latest_snapshot(ctx.snapshot_dir)
    if previous is not None:
        before = load_snapshot(previous)
        logger.debug("Comparing against snapshot %s", previous.name)
    else:
        before = FingerprintStore(algorithm=config.algorithm)
        logger.debug("No prior snapshot, every file counts as added")

    # On a switch each file is read once and digested with both algorithms
    rehash_with = None
    if not dry_run and config.algorithm != before.algorithm:
        logger.info(
            "Switching digest algorithm from %s to %s",
            before.algorithm, config.algorithm,
        )
        rehash_with = config.algorithm

    scan = scan_tree(
        ctx.root,
        ignore=ignore,
        algorithm=before.algorithm,
        rehash_with=rehash_with,
        missing_ok=ctx.missing_ok,
    )
    diff = compute_diff(before, scan.store)

    snapshot = None
    if not dry_run:
        current = scan.rehashed if scan.rehashed is not None else scan.store
        snapshot = persist_snapshot(current, ctx.snapshot_dir, clock)

    return FreezeResult(
        diff=diff,
        snapshot=snapshot,
        previous=previous,
        scan_errors=scan.errors,
        file_count=len(scan.store),
    )


# ============= Snapshot Queries =============

def snapshot_history(ctx: ProjectContext) -> List[SnapshotRef]:
    """All snapshots of the root, oldest first."""
    return list_snapshots(ctx.snapshot_dir)


def resolve_snapshot(ctx: ProjectContext, name: str) -> SnapshotRef:
    """Find a snapshot by file name, or by the keywords 'latest'/'previous'.

    Raises:
        SnapshotNotFoundError: If no snapshot matches
    """
    refs = snapshot_history(ctx)
    if name == LATEST:
        if refs:
            return refs[-1]
    elif name == PREVIOUS:
        if len(refs) >= 2:
            return refs[-2]
    else:
        for ref in refs:
            if ref.name == name:
                return ref
    raise SnapshotNotFoundError(name)


def compare_snapshots(ctx: ProjectContext, before: str, after: str) -> DiffResult:
    """Diff two stored snapshots named as in resolve_snapshot."""
    before_ref = resolve_snapshot(ctx, before)
    after_ref = resolve_snapshot(ctx, after)
    return compute_diff(load_snapshot(before_ref), load_snapshot(after_ref))
