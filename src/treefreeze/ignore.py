"""Gitignore-style pattern matching for treefreeze."""

from pathlib import Path
from typing import Iterable

from pathspec import PathSpec
from pathspec.patterns import GitWildMatchPattern

from .constants import IGNORE_FILE, TREEFREEZE_DIR
from .errors import ConfigError


# Patterns that are always ignored
DEFAULTS = [
    # Snapshot storage must never fingerprint its own history
    f"/{TREEFREEZE_DIR}/",
]


def read_ignore_file(path: Path) -> list:
    """Read patterns from an ignore file, skipping blanks and comments.

    Raises:
        ConfigError: If the file cannot be read or is not UTF-8
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    patterns = []
    for line in text.splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            patterns.append(line)
    return patterns


class IgnoreSpec:
    """Manages gitignore-style patterns for file exclusion."""

    def __init__(self, root: Path, extra: Iterable[str] = ()):
        """Initialize ignore spec with default and custom patterns.

        Args:
            root: Scanned root directory
            extra: Additional patterns to include (e.g. from config.yaml)
        """
        self.root = root
        patterns = list(DEFAULTS)

        # Load project-specific .treefreezeignore if it exists
        ignore_file = root / IGNORE_FILE
        if ignore_file.is_file():
            patterns.extend(read_ignore_file(ignore_file))

        patterns.extend(extra)
        self.patterns = patterns
        self.spec = PathSpec.from_lines(GitWildMatchPattern, patterns)

    def is_ignored(self, relpath: str) -> bool:
        """Check if a root-relative POSIX path should be ignored.

        Args:
            relpath: Root-relative path in POSIX format (forward slashes)

        Returns:
            True if the path matches any ignore pattern
        """
        if is_tool_path(relpath):
            return True
        return self.spec.match_file(relpath)

    def should_traverse(self, dirpath: str) -> bool:
        """Check if a directory should be traversed during scanning.

        If a directory is ignored, it is skipped along with everything
        beneath it.

        Args:
            dirpath: Root-relative directory path in POSIX format

        Returns:
            True if the directory should be traversed
        """
        if is_tool_path(dirpath):
            return False

        # Add trailing slash to match directory patterns
        if not dirpath.endswith("/"):
            dirpath = dirpath + "/"

        return not self.spec.match_file(dirpath)


def is_tool_path(relpath: str) -> bool:
    """True for the tool directory itself and anything beneath it."""
    relpath = relpath.rstrip("/")
    return relpath == TREEFREEZE_DIR or relpath.startswith(TREEFREEZE_DIR + "/")
