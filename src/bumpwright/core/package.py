"""A logical package: one or more versioned files released together."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bumpwright.exceptions import InconsistentVersionsError, NoPackagesError
from bumpwright.logging import get_logger
from bumpwright.project.versioned_file import FileKind, GoVersioning, VersionedFile

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from bumpwright.config.models import PackageConfig
    from bumpwright.core.changes import Change
    from bumpwright.core.mode import Action
    from bumpwright.core.version import Version

logger = get_logger(__name__)


@dataclass
class Package:
    """Versioned files that share one version, plus the changes pending for them.

    Build instances with :meth:`new` so the files are checked for agreement.
    """

    versioned_files: list[VersionedFile]
    name: str | None = None
    scopes: list[str] | None = None
    go_versioning: GoVersioning = GoVersioning.STANDARD
    pending_changes: list[Change] = field(default_factory=list)

    @classmethod
    def new(
        cls,
        versioned_files: Sequence[VersionedFile],
        *,
        name: str | None = None,
        scopes: Sequence[str] | None = None,
        go_versioning: GoVersioning = GoVersioning.STANDARD,
    ) -> Package:
        """Combine versioned files into one package.

        Files that carry no version (go.mod) are not compared.

        Raises:
            NoPackagesError: If no versioned file is given
            InconsistentVersionsError: If two files record different versions
        """
        if not versioned_files:
            raise NoPackagesError("Packages must have at least one versioned file")
        bearing = [f for f in versioned_files if f.carries_version]
        if bearing:
            first = bearing[0]
            conflict = next((f for f in bearing if f.version != first.version), None)
            if conflict is not None:
                raise InconsistentVersionsError(first.path, str(first.version), conflict.path, str(conflict.version))
        return cls(
            versioned_files=list(versioned_files),
            name=name,
            scopes=list(scopes) if scopes is not None else None,
            go_versioning=go_versioning,
        )

    @classmethod
    def from_config(cls, config: PackageConfig, root: Path, name: str | None = None) -> Package:
        """Load the package's versioned files relative to ``root``."""
        files = [VersionedFile.load(root / path) for path in config.versioned_files]
        go_versioning = GoVersioning.IGNORE_MAJOR_RULES if config.ignore_go_major_versioning else GoVersioning.STANDARD
        return cls.new(files, name=name, scopes=config.scopes, go_versioning=go_versioning)

    def get_version(self) -> Version | None:
        """The version recorded by the package's files, None if only tags know it."""
        for versioned_file in self.versioned_files:
            if versioned_file.carries_version:
                return versioned_file.version
        return None

    def set_version(self, new_version: Version, go_versioning: GoVersioning | None = None) -> list[Action]:
        """Return the write actions that set every file to ``new_version``.

        Raises:
            VersionNotFoundError: If a file has no version field to replace
            GoModError: If a go.mod module line cannot be updated
        """
        policy = go_versioning if go_versioning is not None else self.go_versioning
        actions: list[Action] = []
        for versioned_file in self.versioned_files:
            actions.extend(versioned_file.set_version(new_version, policy))
        return actions

    @property
    def display_name(self) -> str:
        return self.name or "package"


def find_packages(root: Path) -> list[Package]:
    """Discover a single unnamed package from well-known files in ``root``.

    Returns:
        A list with one package, or an empty list when no known file exists
    """
    loaded = [VersionedFile.load(root / kind.value) for kind in FileKind if (root / kind.value).is_file()]
    # A pyproject.toml with a dynamic version is not a versioned file
    files = [f for f in loaded if f.version is not None or not f.carries_version]
    if not files:
        return []
    logger.debug("package_discovered", files=[str(f.path.name) for f in files])
    return [Package.new(files)]
