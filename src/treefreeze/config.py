"""Configuration helpers."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import yaml

from .constants import DEFAULT_ALGORITHM
from .errors import ConfigError
from .hashing import SUPPORTED_ALGORITHMS


@dataclass
class FreezeConfig:
    """Settings read from .treefreeze/config.yaml."""

    algorithm: str = DEFAULT_ALGORITHM
    ignore: List[str] = field(default_factory=list)


def load_config(cfg_path: Path) -> FreezeConfig:
    """Load configuration from ``cfg_path`` if present.

    Raises:
        ConfigError: If the file exists but is unreadable or invalid
    """
    if not cfg_path.exists():
        return FreezeConfig()

    try:
        data = yaml.safe_load(cfg_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read {cfg_path}: {e}") from e

    if data is None:
        return FreezeConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"{cfg_path} must contain a mapping")

    algorithm = data.get("algorithm", DEFAULT_ALGORITHM)
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ConfigError(
            f"Unsupported algorithm {algorithm!r} in {cfg_path} "
            f"(expected one of: {', '.join(SUPPORTED_ALGORITHMS)})"
        )

    ignore = data.get("ignore") or []
    if not isinstance(ignore, list) or not all(isinstance(p, str) for p in ignore):
        raise ConfigError(f"'ignore' in {cfg_path} must be a list of patterns")

    return FreezeConfig(algorithm=algorithm, ignore=ignore)

