"""Change files ("changesets") written by hand alongside commits.

Each change file lives in the changeset directory (``.changeset`` by
default), is named after its unique id, and maps package names to change
types in a front matter block::

    ---
    first: major
    "second": minor
    ---

    # Summary heading

    Optional details.

Change files are distributed to the packages they name. Once a stable
release has consumed a change file it is deleted; prereleases never delete
change files, so the following release still sees them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bumpwright.core.changes import Change, ChangeSource, ChangeType
from bumpwright.core.mode import RemoveFile, WriteToFile
from bumpwright.exceptions import ChangesetLoadingError
from bumpwright.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from bumpwright.core.mode import Mode
    from bumpwright.core.package import Package

logger = get_logger(__name__)

DEFAULT_CHANGESET_PACKAGE_NAME = "default"

_FRONT_MATTER_DELIMITER = "---"
_VERSIONING_LINE_RE = re.compile(r"""^(?P<quote>["']?)(?P<name>[^"':]+)(?P=quote)\s*:\s*(?P<change_type>[\w-]+)\s*$""")
_NON_ALPHANUMERIC_RE = re.compile(r"[^a-z0-9]+")


def unique_id_from_summary(summary: str) -> str:
    """Derive a stable id from a change summary.

    The same summary always produces the same id, and therefore the same
    file name.

    Example:
        >>> unique_id_from_summary("# Add a brand-new Feature!")
        'add_a_brand_new_feature'
    """
    return _NON_ALPHANUMERIC_RE.sub("_", summary.lower()).strip("_")


@dataclass(frozen=True)
class ChangesetEntry:
    """One change file.

    Attributes:
        unique_id: Id the file name is derived from
        summary: Markdown summary, usually starting with a heading
        versioning: Package name to change type
    """

    unique_id: str
    summary: str
    versioning: dict[str, ChangeType] = field(default_factory=dict)

    @classmethod
    def from_summary(cls, summary: str, versioning: dict[str, ChangeType]) -> ChangesetEntry:
        return cls(unique_id_from_summary(summary), summary, versioning)

    @property
    def file_name(self) -> str:
        return f"{self.unique_id}.md"

    def to_markdown(self) -> str:
        lines = [_FRONT_MATTER_DELIMITER]
        lines.extend(f"{name}: {change_type}" for name, change_type in self.versioning.items())
        lines.append(_FRONT_MATTER_DELIMITER)
        lines.append("")
        lines.append(self.summary.strip())
        return "\n".join(lines) + "\n"


def load_changeset(path: Path) -> ChangesetEntry:
    """Load a single change file.

    Raises:
        ChangesetLoadingError: If the file is unreadable or malformed
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ChangesetLoadingError(path, str(e)) from e

    lines = text.strip().splitlines()
    if not lines or lines[0].strip() != _FRONT_MATTER_DELIMITER:
        raise ChangesetLoadingError(path, "missing front matter")

    try:
        end = next(i for i, line in enumerate(lines[1:], start=1) if line.strip() == _FRONT_MATTER_DELIMITER)
    except StopIteration:
        raise ChangesetLoadingError(path, "unclosed front matter") from None

    versioning: dict[str, ChangeType] = {}
    for line in lines[1:end]:
        stripped = line.strip()
        if not stripped:
            continue
        match = _VERSIONING_LINE_RE.match(stripped)
        if not match:
            raise ChangesetLoadingError(path, f"invalid line in front matter: {stripped!r}")
        versioning[match.group("name").strip()] = ChangeType(match.group("change_type"))

    if not versioning:
        raise ChangesetLoadingError(path, "no packages listed in front matter")

    summary = "\n".join(lines[end + 1 :]).strip()
    return ChangesetEntry(unique_id=path.stem, summary=summary, versioning=versioning)


def load_changeset_dir(directory: Path) -> list[ChangesetEntry]:
    """Load every change file in a directory, sorted by file name.

    Raises:
        ChangesetLoadingError: If any change file is malformed
    """
    entries = [load_changeset(path) for path in sorted(directory.glob("*.md")) if path.name != "README.md"]
    logger.debug("changesets_loaded", directory=str(directory), count=len(entries))
    return entries


def add_releases_from_changesets(packages: Iterable[Package], *, changeset_dir: Path) -> list[Package]:
    """Add the changes of every change file to the packages they name.

    Packages are matched by name; an unnamed package is matched as
    ``"default"``. Nothing on disk changes here: which files to delete is
    decided by :func:`changeset_removals` once the releases are known.

    Args:
        packages: Packages to extend, in configuration order
        changeset_dir: Directory containing change files

    Returns:
        The same packages with pending changes added

    Raises:
        ChangesetLoadingError: If any change file is malformed
    """
    packages = list(packages)
    if not changeset_dir.is_dir():
        logger.debug("changeset_dir_missing", path=str(changeset_dir))
        return packages

    entries = load_changeset_dir(changeset_dir)
    for package in packages:
        key = package.name or DEFAULT_CHANGESET_PACKAGE_NAME
        for entry in entries:
            change_type = entry.versioning.get(key)
            if change_type is None:
                continue
            package.pending_changes.append(
                Change(change_type, entry.summary, ChangeSource.CHANGESET, unique_id=entry.unique_id)
            )
            logger.debug("changeset_applied", package=key, id=entry.unique_id, change_type=str(change_type))
    return packages


def changeset_removals(
    packages: Iterable[Package],
    *,
    changeset_dir: Path,
    is_prerelease: bool,
    deleted_ids: set[str] | None = None,
) -> list[RemoveFile]:
    """Removal actions for the change files consumed by released packages.

    Each change file is removed exactly once, even when several released
    packages received it. Prereleases never remove change files, so the
    following release still sees them.

    Args:
        packages: Packages that are being released
        changeset_dir: Directory containing change files
        is_prerelease: Whether the release being prepared is a prerelease
        deleted_ids: Ids of change files already removed in this run; updated in place
    """
    if is_prerelease:
        return []
    deleted_ids = deleted_ids if deleted_ids is not None else set()
    removals = []
    for package in packages:
        for change in package.pending_changes:
            if change.source is not ChangeSource.CHANGESET or change.unique_id in deleted_ids:
                continue
            deleted_ids.add(change.unique_id)
            removals.append(RemoveFile(changeset_dir / f"{change.unique_id}.md"))
    return removals


def remove_changesets(removals: Iterable[RemoveFile], mode: Mode) -> None:
    """Remove consumed change files, logging any that cannot be removed."""
    for removal in removals:
        try:
            mode.execute([removal])
        except OSError as e:
            # The version decision is already made; a stale file only needs manual cleanup
            logger.warning("changeset_delete_failed", path=str(removal.path), error=str(e))


def write_change_file(directory: Path, entry: ChangesetEntry, mode: Mode) -> Path:
    """Write a change file into the changeset directory.

    Returns:
        Path of the (possibly previewed) change file
    """
    path = directory / entry.file_name
    if not mode.dry_run:
        directory.mkdir(parents=True, exist_ok=True)
    mode.execute([WriteToFile(path, entry.to_markdown())])
    return path
