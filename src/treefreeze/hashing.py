"""Hashing utilities for file fingerprints.

Fingerprints are raw digest bytes of a file's content. The algorithm is
recorded alongside every fingerprint store so snapshots stay comparable.
"""

from pathlib import Path
from typing import Dict, Sequence
import hashlib

from .constants import DEFAULT_ALGORITHM


# Algorithms accepted in config.yaml and snapshot headers
SUPPORTED_ALGORITHMS = ("sha1", "sha256", "sha512", "blake2b")

CHUNK_SIZE = 8192


def new_hasher(algorithm: str = DEFAULT_ALGORITHM):
    """Create a hash object for a supported algorithm.

    Raises:
        ValueError: If the algorithm is not supported
    """
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ValueError(
            f"Unsupported digest algorithm {algorithm!r} "
            f"(expected one of: {', '.join(SUPPORTED_ALGORITHMS)})"
        )
    return hashlib.new(algorithm)


def digest_size(algorithm: str = DEFAULT_ALGORITHM) -> int:
    """Length in bytes of digests produced by ``algorithm``."""
    return new_hasher(algorithm).digest_size


def compute_file_digest(path: Path, algorithm: str = DEFAULT_ALGORITHM) -> bytes:
    """Compute the digest of file contents.

    Simple byte-for-byte hashing - any change invalidates the digest.
    The file is streamed in chunks so large files are never loaded whole.

    Args:
        path: Path to file to hash
        algorithm: Name of a supported digest algorithm

    Returns:
        Raw digest bytes

    Raises:
        OSError: If the file cannot be opened or read
    """
    return compute_file_digests(path, (algorithm,))[algorithm]


def compute_file_digests(path: Path, algorithms: Sequence[str]) -> Dict[str, bytes]:
    """Digest a file with several algorithms in a single read.

    Returns:
        Mapping of algorithm name to raw digest bytes

    Raises:
        OSError: If the file cannot be opened or read
        ValueError: If any algorithm is not supported
    """
    hashers = {name: new_hasher(name) for name in algorithms}
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            for hasher in hashers.values():
                hasher.update(chunk)
    return {name: hasher.digest() for name, hasher in hashers.items()}


__all__ = [
    "SUPPORTED_ALGORITHMS",
    "compute_file_digest",
    "compute_file_digests",
    "digest_size",
    "new_hasher",
]
