"""Snapshot persistence and selection.

Snapshot file format
--------------------
A header line naming the format version and digest algorithm, then one
record per file, sorted by path::

    # treefreeze snapshot v1 algorithm=sha256
    <hex digest> <JSON-quoted path>

The digest comes first and is hex-encoded, so splitting a record on the
first separator is unambiguous even when the path contains spaces. Paths
are JSON strings, so newlines and undecodable filename bytes round-trip.

Snapshot files are named by their UTC creation time (see
``utils.format_snapshot_name``) and are never modified once written.
"""

from itertools import count
from pathlib import Path
from typing import List, Optional, Union
import errno
import json
import logging
import os
import re
import tempfile

from .constants import (
    RECORD_SEPARATOR,
    SNAPSHOT_FORMAT_VERSION,
    SNAPSHOT_HEADER_PREFIX,
)
from .core import FingerprintStore, SnapshotRef
from .errors import SnapshotError, SnapshotFormatError, SnapshotWriteError
from .hashing import SUPPORTED_ALGORITHMS, digest_size
from .utils import Clock, format_snapshot_name, parse_snapshot_name, utc_now

logger = logging.getLogger(__name__)

_HEADER = re.compile(
    rf"^{re.escape(SNAPSHOT_HEADER_PREFIX)} v(?P<version>\d+) algorithm=(?P<algorithm>\S+)$"
)

# errno values meaning the filesystem cannot hard-link
_LINK_UNSUPPORTED = {errno.EPERM, errno.EOPNOTSUPP, errno.ENOTSUP, errno.ENOSYS}


# ============= Serialization =============

def serialize_store(store: FingerprintStore) -> str:
    """Encode a fingerprint store in snapshot file format."""
    lines = [
        f"{SNAPSHOT_HEADER_PREFIX} v{SNAPSHOT_FORMAT_VERSION} algorithm={store.algorithm}"
    ]
    for path in store.paths:
        lines.append(f"{store.files[path].hex()}{RECORD_SEPARATOR}{json.dumps(path)}")
    return "\n".join(lines) + "\n"


def _parse_header(snapshot_path: Path, line: str) -> str:
    """Validate the header line and return the digest algorithm."""
    match = _HEADER.match(line)
    if not match:
        raise SnapshotFormatError(snapshot_path, 1, "missing snapshot header")
    version = int(match.group("version"))
    if version != SNAPSHOT_FORMAT_VERSION:
        raise SnapshotFormatError(snapshot_path, 1, f"unsupported format version {version}")
    algorithm = match.group("algorithm")
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise SnapshotFormatError(snapshot_path, 1, f"unsupported algorithm {algorithm!r}")
    return algorithm


def _parse_record(snapshot_path: Path, line_no: int, line: str, expected_size: int):
    """Split one record into (path, digest)."""
    digest_hex, sep, quoted_path = line.partition(RECORD_SEPARATOR)
    if not sep:
        raise SnapshotFormatError(snapshot_path, line_no, "missing separator")

    try:
        digest = bytes.fromhex(digest_hex)
    except ValueError:
        raise SnapshotFormatError(snapshot_path, line_no, "digest is not hexadecimal")
    if len(digest) != expected_size:
        raise SnapshotFormatError(
            snapshot_path, line_no,
            f"digest is {len(digest)} bytes, expected {expected_size}",
        )

    try:
        path = json.loads(quoted_path)
    except json.JSONDecodeError:
        raise SnapshotFormatError(snapshot_path, line_no, "path is not a quoted string")
    if not isinstance(path, str) or not path:
        raise SnapshotFormatError(snapshot_path, line_no, "path is not a quoted string")

    return path, digest


def load_snapshot(snapshot: Union[SnapshotRef, Path]) -> FingerprintStore:
    """Load a snapshot file back into a fingerprint store.

    Raises:
        SnapshotFormatError: If any line is malformed
        SnapshotError: If the file cannot be read
    """
    snapshot_path = snapshot.path if isinstance(snapshot, SnapshotRef) else Path(snapshot)
    store: Optional[FingerprintStore] = None
    expected_size = 0
    line_no = 0

    try:
        with snapshot_path.open("r", encoding="utf-8") as f:
            for line_no, raw in enumerate(f, start=1):
                line = raw.rstrip("\n")
                if store is None:
                    algorithm = _parse_header(snapshot_path, line)
                    store = FingerprintStore(algorithm=algorithm)
                    expected_size = digest_size(algorithm)
                    continue

                path, digest = _parse_record(snapshot_path, line_no, line, expected_size)
                if path in store:
                    raise SnapshotFormatError(snapshot_path, line_no, f"duplicate path {path!r}")
                store.add(path, digest)
    except UnicodeDecodeError:
        raise SnapshotFormatError(snapshot_path, line_no + 1, "not valid UTF-8")
    except OSError as e:
        raise SnapshotError(f"Cannot read snapshot {snapshot_path}: {e.strerror or e}") from e

    if store is None:
        raise SnapshotFormatError(snapshot_path, 1, "missing snapshot header")

    logger.debug("Loaded %d fingerprints from %s", len(store), snapshot_path.name)
    return store


# ============= Persistence =============

def _fsync_dir(path: Path) -> None:
    """Fsync a directory so new entries are durable (best-effort)."""
    try:
        flags = os.O_RDONLY
        if hasattr(os, "O_DIRECTORY"):
            flags |= os.O_DIRECTORY
        fd = os.open(str(path), flags)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)
    except OSError:
        # Expected on Windows or filesystems that don't support directory fsync
        logger.debug("Directory fsync not supported for %s", path)


def _write_temp(directory: Path, text: str) -> Path:
    """Write text to a hidden temp file in ``directory`` and fsync it.

    The temp file is removed again if writing fails.
    """
    f = tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        delete=False,
        dir=directory,
        prefix=".snapshot.tmp-",
    )
    tmp = Path(f.name)
    try:
        with f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    return tmp


def _claim(tmp: Path, target: Path) -> None:
    """Give the finished temp file the name ``target``.

    Raises:
        FileExistsError: If ``target`` is already taken
    """
    try:
        os.link(tmp, target)
        return
    except FileExistsError:
        raise
    except OSError as e:
        if e.errno not in _LINK_UNSUPPORTED:
            raise
        logger.debug("Hard links unsupported in %s, claiming %s exclusively",
                     target.parent, target.name)

    # Reserve the name exclusively, then move the content over it
    os.close(os.open(target, os.O_CREAT | os.O_EXCL | os.O_WRONLY))
    try:
        os.replace(tmp, target)
    except OSError:
        target.unlink(missing_ok=True)
        raise


def persist_snapshot(
    store: FingerprintStore,
    snapshot_dir: Path,
    clock: Clock = utc_now,
) -> SnapshotRef:
    """Write ``store`` as a new snapshot named by the clock's current time.

    The content is written to a temp file first and then hard-linked to its
    final name, so a snapshot is either complete or absent. Linking fails if
    the name is taken, in which case a ``-1``, ``-2``... suffix is tried, so
    two runs within the same microsecond never overwrite each other. On
    filesystems without hard links the name is reserved with an exclusive
    create and the temp file is renamed onto it.

    Raises:
        SnapshotWriteError: If the directory cannot be created or written
    """
    try:
        snapshot_dir.mkdir(parents=True, exist_ok=True)
        tmp = _write_temp(snapshot_dir, serialize_store(store))
    except OSError as e:
        raise SnapshotWriteError(snapshot_dir, e.strerror or str(e)) from e

    try:
        moment = clock()
        for sequence in count():
            target = snapshot_dir / format_snapshot_name(moment, sequence)
            try:
                _claim(tmp, target)
            except FileExistsError:
                logger.debug("Snapshot name %s taken, trying next suffix", target.name)
                continue
            break
    except OSError as e:
        raise SnapshotWriteError(snapshot_dir, e.strerror or str(e)) from e
    finally:
        tmp.unlink(missing_ok=True)

    _fsync_dir(snapshot_dir)
    timestamp, sequence = parse_snapshot_name(target.name)
    logger.debug("Wrote snapshot %s (%d files)", target.name, len(store))
    return SnapshotRef(path=target, timestamp=timestamp, sequence=sequence)


# ============= Selection =============

def list_snapshots(snapshot_dir: Path) -> List[SnapshotRef]:
    """List all snapshots in ``snapshot_dir``, oldest first.

    Files whose names do not parse as snapshot timestamps are skipped.
    A missing directory has no snapshots.
    """
    if not snapshot_dir.is_dir():
        return []

    refs = []
    for entry in snapshot_dir.iterdir():
        parsed = parse_snapshot_name(entry.name)
        if parsed is None or not entry.is_file():
            if not entry.name.startswith("."):
                logger.warning("Ignoring stray entry in snapshot directory: %s", entry.name)
            continue
        timestamp, sequence = parsed
        refs.append(SnapshotRef(path=entry, timestamp=timestamp, sequence=sequence))

    return sorted(refs, key=lambda ref: ref.sort_key)


def latest_snapshot(snapshot_dir: Path) -> Optional[SnapshotRef]:
    """Get the most recently created snapshot, or None if there is none."""
    refs = list_snapshots(snapshot_dir)
    if not refs:
        logger.debug("No prior snapshot in %s", snapshot_dir)
        return None
    return refs[-1]
