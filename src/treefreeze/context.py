"""Project context for managing the scanned root and its tool directory."""

from pathlib import Path
from typing import Optional, Union

from .config import FreezeConfig, load_config
from .constants import CONFIG_FILE, SNAPSHOTS_DIR, TREEFREEZE_DIR
from .ignore import IgnoreSpec


class ProjectContext:
    """Resolves the scanned root and the well-known paths beneath it."""

    def __init__(self, root: Union[str, Path], *, missing_ok: bool = False):
        """Initialize context for a root directory.

        Args:
            root: Directory to snapshot (need not exist yet)
            missing_ok: Treat a missing root as an empty tree instead of an error
        """
        self.root = Path(root).expanduser().resolve()
        self.missing_ok = missing_ok
        self._ignore_spec: Optional[IgnoreSpec] = None
        self._config: Optional[FreezeConfig] = None

    @property
    def tool_dir(self) -> Path:
        """Get the tool directory (never scanned)."""
        return self.root / TREEFREEZE_DIR

    @property
    def snapshot_dir(self) -> Path:
        """Get the directory holding snapshot files."""
        return self.tool_dir / SNAPSHOTS_DIR

    @property
    def config_path(self) -> Path:
        """Get path to config file."""
        return self.tool_dir / CONFIG_FILE

    def get_config(self) -> FreezeConfig:
        """Get the configuration (memoized)."""
        if self._config is None:
            self._config = load_config(self.config_path)
        return self._config

    def get_ignore_spec(self) -> IgnoreSpec:
        """Get the ignore specification (memoized)."""
        if self._ignore_spec is None:
            self._ignore_spec = IgnoreSpec(self.root, self.get_config().ignore)
        return self._ignore_spec

