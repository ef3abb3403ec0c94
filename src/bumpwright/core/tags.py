"""Resolve current versions from release tags.

Release tags are ``v<version>`` for a single package and
``<name>/v<version>`` for named packages. Tags are treated as an unordered
collection: when history branches and merges, every reachable tag counts and
the highest version wins, wherever it sits in the commit graph.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from bumpwright.core.version import CurrentVersions, Version
from bumpwright.exceptions import VersionParseError
from bumpwright.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = get_logger(__name__)


def tag_prefix(package_name: str | None = None) -> str:
    """Return the tag prefix for a package."""
    if package_name:
        return f"{package_name}/v"
    return "v"


def tag_name(version: Version, package_name: str | None = None) -> str:
    """Return the release tag for a version of a package.

    Example:
        >>> tag_name(Version.parse("1.2.3"), "first")
        'first/v1.2.3'
    """
    return f"{tag_prefix(package_name)}{version}"


def versions_from_tags(tags: Iterable[str], package_name: str | None = None) -> list[Version]:
    """Parse every tag of a package into a version, ignoring other tags."""
    prefix = tag_prefix(package_name)
    versions = []
    for tag in tags:
        tag = tag.removeprefix("refs/tags/")
        if not tag.startswith(prefix):
            continue
        try:
            versions.append(Version.parse(tag[len(prefix) :]))
        except VersionParseError:
            logger.debug("tag_ignored", tag=tag)
    return versions


def current_versions_from_tags(tags: Iterable[str], package_name: str | None = None) -> CurrentVersions | None:
    """Find the latest stable version, and any newer prerelease, from tags.

    A stable release evicts every prerelease that is not newer than it, even
    one tagged after it, because such a prerelease necessarily led up to that
    release.

    Args:
        tags: Tag names, in any order
        package_name: Restrict to tags of this package

    Returns:
        The current versions, or None if no stable release is tagged
    """
    stable: Version | None = None
    prerelease: Version | None = None
    for version in versions_from_tags(tags, package_name):
        if version.is_prerelease:
            if prerelease is None or version > prerelease:
                prerelease = version
        elif stable is None or version > stable:
            stable = version

    if stable is None:
        return None
    if prerelease is not None and prerelease <= stable:
        prerelease = None
    return CurrentVersions(stable=stable.stable, prerelease=prerelease)
