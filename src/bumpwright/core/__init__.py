"""Core business logic for bumpwright.

This module contains the release decision engine:
- Semantic versions and bump rules
- Conventional commit analysis
- Change files (changesets)
- Current version resolution from tags
- Packages of versioned files
- Release orchestration and release notes
"""

from __future__ import annotations

from bumpwright.core.changelog import release_notes
from bumpwright.core.changes import Change, ChangeSource, ChangeType
from bumpwright.core.changesets import (
    ChangesetEntry,
    add_releases_from_changesets,
    load_changeset_dir,
    unique_id_from_summary,
    write_change_file,
)
from bumpwright.core.commits import ConventionalCommits, ParsedCommit, parse_commits
from bumpwright.core.mode import Mode, Recorder
from bumpwright.core.package import Package, find_packages
from bumpwright.core.release import Release, bump_version, get_version, prepare_release
from bumpwright.core.tags import current_versions_from_tags, tag_name
from bumpwright.core.version import (
    ConventionalRule,
    CurrentVersions,
    Prerelease,
    Rule,
    StableVersion,
    Version,
    bump,
    parse_version,
)

__all__ = [
    # Changes
    "Change",
    "ChangeSource",
    "ChangeType",
    # Changesets
    "ChangesetEntry",
    # Commits
    "ConventionalCommits",
    # Version
    "ConventionalRule",
    "CurrentVersions",
    # Mode
    "Mode",
    # Package
    "Package",
    "ParsedCommit",
    "Prerelease",
    "Recorder",
    # Release
    "Release",
    "Rule",
    "StableVersion",
    "Version",
    "add_releases_from_changesets",
    "bump",
    "bump_version",
    "current_versions_from_tags",
    "find_packages",
    "get_version",
    "load_changeset_dir",
    "parse_commits",
    "parse_version",
    "prepare_release",
    "release_notes",
    "tag_name",
    "unique_id_from_summary",
    "write_change_file",
]
