"""Release orchestration: decide and apply the next version of each package.

For every package the coordinator

1. resolves the current versions from its files and release tags,
2. analyses the conventional commits since the last stable tag,
3. merges in the changes from change files,
4. picks the most severe rule (wrapped in a prerelease rule when a
   prerelease label is configured) or the explicit override version,
5. bumps, and builds the write actions for the new version.

Packages are processed one after the other in configuration order, and one
package without changes never blocks the release of another. Files are only
written, and consumed change files removed, once every package is decided.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from bumpwright.core.changelog import release_notes
from bumpwright.core.changesets import add_releases_from_changesets, changeset_removals, remove_changesets
from bumpwright.core.changes import Change, most_severe_change
from bumpwright.core.commits import (
    DEFAULT_SKIP_RELEASE_PATTERNS,
    ConventionalCommits,
    filter_skip_release_commits,
)
from bumpwright.core.mode import Mode
from bumpwright.core.tags import current_versions_from_tags, tag_name
from bumpwright.core.version import ConventionalRule, CurrentVersions, Rule, Version, bump
from bumpwright.exceptions import NoPackagesError, NoReleaseError, TooManyPackagesError
from bumpwright.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from bumpwright.core.mode import Action
    from bumpwright.core.package import Package

logger = get_logger(__name__)


class Repository(Protocol):
    """The version control operations the release engine needs."""

    def list_tags(self) -> list[str]:
        """All tag names, unfiltered."""
        ...

    def commits_since(self, ref_name: str | None) -> list[str]:
        """Messages of commits reachable from HEAD but not from ``ref_name``."""
        ...


@dataclass(frozen=True)
class PackageVersion:
    """A package together with its resolved current versions."""

    package: Package
    versions: CurrentVersions

    @property
    def latest(self) -> Version:
        return self.versions.latest


@dataclass
class Release:
    """A release decided for one package.

    Attributes:
        package_name: Name of the package, None for an unnamed package
        previous: Latest version before the release
        version: The new version
        rule: Rule that produced the version, None for an override
        changes: Changes included in the release
        notes: Rendered release notes
    """

    package_name: str | None
    previous: Version
    version: Version
    rule: Rule | None
    changes: list[Change] = field(default_factory=list)
    notes: str = ""

    @property
    def tag(self) -> str:
        return tag_name(self.version, self.package_name)


def current_versions(package: Package, tags: Sequence[str]) -> CurrentVersions:
    """Resolve the current versions of a package.

    The version recorded in the package's files wins. When that version is a
    prerelease, the stable version comes from tags. When no file records a
    version, tags alone decide, defaulting to ``0.0.0``.
    """
    from_tags = current_versions_from_tags(tags, package.name) or CurrentVersions()
    recorded = package.get_version()
    if recorded is None:
        return from_tags
    if recorded.is_prerelease:
        stable = from_tags.stable
        # A prerelease that is not newer than the stable release is stale
        prerelease = recorded if recorded > Version(stable) else None
        return CurrentVersions(stable=stable, prerelease=prerelease)
    prerelease = from_tags.prerelease
    if prerelease is not None and prerelease <= recorded:
        prerelease = None
    return CurrentVersions(stable=recorded.stable, prerelease=prerelease)


def last_stable_tag(package: Package, tags: Sequence[str]) -> str | None:
    """The tag of the package's latest stable release, None if never released."""
    from_tags = current_versions_from_tags(tags, package.name)
    if from_tags is None:
        return None
    return tag_name(Version(from_tags.stable), package.name)


def get_version(packages: Sequence[Package], tags: Sequence[str]) -> PackageVersion:
    """Resolve the current version of the single configured package.

    Raises:
        NoPackagesError: If no package is defined
        TooManyPackagesError: If more than one package is defined
    """
    if not packages:
        raise NoPackagesError()
    if len(packages) > 1:
        raise TooManyPackagesError()
    package = packages[0]
    return PackageVersion(package=package, versions=current_versions(package, tags))


def bump_version(rule: Rule, packages: Sequence[Package], tags: Sequence[str], mode: Mode) -> Version:
    """Apply an explicit rule to the single configured package.

    Returns:
        The new version

    Raises:
        NoPackagesError: If no package is defined
        TooManyPackagesError: If more than one package is defined
        InvalidPrereleaseVersionError: For a release rule without a prerelease
    """
    package_version = get_version(packages, tags)
    version = bump(package_version.versions, rule).latest
    logger.debug("version_bumped", rule=str(rule), previous=str(package_version.latest), version=str(version))
    mode.execute(package_version.package.set_version(version))
    mode.record(f"Would bump version to {version}")
    return version


def _override_for(
    package: Package, overrides: Mapping[str | None, Version], single_package: bool
) -> Version | None:
    if package.name in overrides:
        return overrides[package.name]
    if single_package and None in overrides:
        return overrides[None]
    return None


def prepare_release(
    packages: Sequence[Package],
    repo: Repository,
    *,
    mode: Mode | None = None,
    prerelease_label: str | None = None,
    changeset_dir: Path = Path(".changeset"),
    overrides: Mapping[str | None, Version] | None = None,
    custom_rules: Mapping[str, ConventionalRule] | None = None,
    skip_release_patterns: Sequence[str] = DEFAULT_SKIP_RELEASE_PATTERNS,
) -> list[Release]:
    """Decide and apply the next version of every package with changes.

    Every package is decided, and its write actions built, before the first
    file is touched. A failure in any package therefore leaves the project
    and its change files as they were.

    Args:
        packages: Packages in configuration order
        repo: Source of tags and commit messages
        mode: Apply (default) or preview the changes
        prerelease_label: Release prereleases with this label (e.g. "rc")
        changeset_dir: Directory of change files
        overrides: Explicit versions by package name (None for an unnamed package)
        custom_rules: Severities of custom change types
        skip_release_patterns: Markers excluding a commit from consideration

    Returns:
        The releases, one per package with changes

    Raises:
        NoPackagesError: If no package is defined
        NoReleaseError: If no package has anything to release
        ChangesetLoadingError: If a change file is malformed
    """
    if not packages:
        raise NoPackagesError()
    mode = mode if mode is not None else Mode.apply()
    overrides = overrides or {}
    prerelease_label = prerelease_label or None

    consider_scopes = any(package.scopes for package in packages)
    packages = add_releases_from_changesets(packages, changeset_dir=changeset_dir)
    tags = repo.list_tags()
    single_package = len(packages) == 1

    planned: list[tuple[Package, Release, list[Action]]] = []
    for package in packages:
        release = _decide_package(
            package,
            repo,
            tags,
            consider_scopes=consider_scopes,
            prerelease_label=prerelease_label,
            override=_override_for(package, overrides, single_package),
            custom_rules=custom_rules,
            skip_release_patterns=skip_release_patterns,
        )
        if release is not None:
            planned.append((package, release, package.set_version(release.version)))

    if not planned:
        raise NoReleaseError()

    removals = changeset_removals(
        [package for package, _, _ in planned],
        changeset_dir=changeset_dir,
        is_prerelease=prerelease_label is not None,
    )
    for package, release, actions in planned:
        mode.execute(actions)
        mode.record(f"Would bump {package.display_name} version to {release.version}")
    remove_changesets(removals, mode)
    return [release for _, release, _ in planned]


def _decide_package(
    package: Package,
    repo: Repository,
    tags: Sequence[str],
    *,
    consider_scopes: bool,
    prerelease_label: str | None,
    override: Version | None,
    custom_rules: Mapping[str, ConventionalRule] | None,
    skip_release_patterns: Sequence[str],
) -> Release | None:
    versions = current_versions(package, tags)
    messages = filter_skip_release_commits(repo.commits_since(last_stable_tag(package, tags)), skip_release_patterns)
    commits = ConventionalCommits.from_commit_messages(messages, package.scopes, consider_scopes=consider_scopes)

    changeset_rule = most_severe_change(package.pending_changes, custom_rules)
    package.pending_changes = commits.changes() + package.pending_changes
    conventional_rule = ConventionalRule.most_severe(commits.rule, changeset_rule)

    rule: Rule | None = None
    if override is not None:
        version = override
    elif conventional_rule is None:
        logger.info("package_skipped", package=package.display_name, reason="no relevant changes")
        return None
    else:
        if prerelease_label is not None:
            rule = Rule.pre(prerelease_label, conventional_rule)
        else:
            rule = Rule.from_conventional(conventional_rule)
        version = bump(versions, rule).latest

    logger.debug(
        "release_decided",
        package=package.display_name,
        rule=str(rule) if rule else "override",
        previous=str(versions.latest),
        version=str(version),
    )
    return Release(
        package_name=package.name,
        previous=versions.latest,
        version=version,
        rule=rule,
        changes=list(package.pending_changes),
        notes=release_notes(version, package.pending_changes),
    )
