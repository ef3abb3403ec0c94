"""bumpwright: decide the next semantic version from commits and change files."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("bumpwright")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = ["__version__"]
