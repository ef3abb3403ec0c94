"""Files that record a package's version.

The file type is determined from the file name. Each type has an adapter
module exposing ``get_version(content)`` and ``set_version(content, version)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from bumpwright.core.mode import Action, WriteToFile
from bumpwright.core.version import Version
from bumpwright.exceptions import ProjectError, UnknownVersionedFileError
from bumpwright.project import cargo, go_mod, package_json, pyproject


class FileKind(Enum):
    PYPROJECT = "pyproject.toml"
    PACKAGE_JSON = "package.json"
    CARGO = "Cargo.toml"
    GO_MOD = "go.mod"

    @classmethod
    def from_path(cls, path: Path) -> FileKind:
        """Determine the file kind from its name.

        Raises:
            UnknownVersionedFileError: If the name is not supported
        """
        try:
            return cls(path.name)
        except ValueError:
            raise UnknownVersionedFileError(path) from None


class GoVersioning(Enum):
    """How go.mod files treat major versions."""

    STANDARD = "standard"
    IGNORE_MAJOR_RULES = "ignore_major_rules"


_TEXT_ADAPTERS = {
    FileKind.PYPROJECT: pyproject,
    FileKind.PACKAGE_JSON: package_json,
    FileKind.CARGO: cargo,
}


@dataclass(frozen=True)
class VersionedFile:
    """A version-bearing file and the version it currently records.

    Attributes:
        path: Location of the file
        kind: File type
        content: Text of the file when it was loaded
        version: Recorded version, None for files that carry none (go.mod)
    """

    path: Path
    kind: FileKind
    content: str
    version: Version | None

    @classmethod
    def load(cls, path: Path) -> VersionedFile:
        """Read a versioned file from disk.

        Raises:
            UnknownVersionedFileError: If the file type is not supported
            ProjectError: If the file is missing or unreadable
            VersionParseError: If the recorded version is not valid
        """
        kind = FileKind.from_path(path)
        if not path.is_file():
            raise ProjectError(f"Versioned file not found: {path}")
        try:
            content = path.read_text()
        except OSError as e:
            raise ProjectError(f"Could not read {path}: {e}") from e
        return cls.from_content(path, content, kind)

    @classmethod
    def from_content(cls, path: Path, content: str, kind: FileKind | None = None) -> VersionedFile:
        kind = kind or FileKind.from_path(path)
        raw = go_mod.get_version(content) if kind is FileKind.GO_MOD else _TEXT_ADAPTERS[kind].get_version(content)
        return cls(path=path, kind=kind, content=content, version=Version.parse(raw) if raw is not None else None)

    @property
    def carries_version(self) -> bool:
        return self.kind is not FileKind.GO_MOD

    def set_version(self, new_version: Version, go_versioning: GoVersioning = GoVersioning.STANDARD) -> list[Action]:
        """Return the actions that write ``new_version`` to this file.

        No action is returned when the content would not change.

        Raises:
            VersionNotFoundError: If the file has no version field to replace
            GoModError: If a go.mod module line cannot be updated
        """
        if self.kind is FileKind.GO_MOD:
            if go_versioning is GoVersioning.IGNORE_MAJOR_RULES:
                return []
            content = go_mod.set_version(self.content, new_version)
        else:
            content = _TEXT_ADAPTERS[self.kind].set_version(self.content, str(new_version))
        if content == self.content:
            return []
        return [WriteToFile(self.path, content)]
