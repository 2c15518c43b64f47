"""Directory snapshotting and change detection."""

from .constants import TREEFREEZE_VERSION as __version__

__all__ = ["__version__"]
