"""Version control integration."""

from __future__ import annotations

from bumpwright.vcs.git import GitRepository

__all__ = ["GitRepository"]
