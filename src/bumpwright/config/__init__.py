"""Configuration management for bumpwright."""

from __future__ import annotations

from bumpwright.config.loader import load_config, load_packages
from bumpwright.config.models import (
    BumpwrightConfig,
    ChangesetConfig,
    CommitsConfig,
    PackageConfig,
)

__all__ = [
    "BumpwrightConfig",
    "ChangesetConfig",
    "CommitsConfig",
    "PackageConfig",
    "load_config",
    "load_packages",
]
