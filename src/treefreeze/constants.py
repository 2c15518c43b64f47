"""Constants for treefreeze."""

# Tool directory (under the scanned root, never fingerprinted)
TREEFREEZE_DIR = ".treefreeze"

# Locations inside TREEFREEZE_DIR
SNAPSHOTS_DIR = "versions"
CONFIG_FILE = "config.yaml"

# Project-level ignore file (under the scanned root)
IGNORE_FILE = ".treefreezeignore"

# Snapshot file format
SNAPSHOT_FORMAT_VERSION = 1
SNAPSHOT_HEADER_PREFIX = "# treefreeze snapshot"
RECORD_SEPARATOR = " "

# Snapshot file names: UTC timestamp with microseconds, e.g. 20261019T120000.000000Z
SNAPSHOT_TIME_FORMAT = "%Y%m%dT%H%M%S.%fZ"

DEFAULT_ALGORITHM = "sha256"

# Version
TREEFREEZE_VERSION = "0.1.0"
