"""Exception hierarchy for bumpwright.

All errors raised by bumpwright derive from :class:`BumpwrightError`, so
callers (the CLI in particular) can catch a single type and report it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class BumpwrightError(Exception):
    """Base class for all bumpwright errors.

    Args:
        message: Human readable description of the failure
        hint: Optional suggestion on how to fix it
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message}\n  hint: {self.hint}"
        return self.message


# =============================================================================
# Configuration
# =============================================================================


class ConfigError(BumpwrightError):
    """Base class for configuration problems."""


class ConfigNotFoundError(ConfigError):
    """No pyproject.toml could be located."""


class ConfigValidationError(ConfigError):
    """The configuration exists but is invalid."""


# =============================================================================
# Versions
# =============================================================================


class VersionParseError(BumpwrightError):
    """A string is not a valid semantic version."""

    def __init__(self, version: str, reason: str | None = None) -> None:
        message = f"Found invalid semantic version {version!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, hint="The version must look like 1.2.3 or 1.2.3-rc.0")
        self.version = version


class InvalidPrereleaseVersionError(BumpwrightError):
    """A prerelease is missing, malformed or cannot be incremented."""


# =============================================================================
# Packages and versioned files
# =============================================================================


class ProjectError(BumpwrightError):
    """A versioned file could not be read or written."""


class VersionNotFoundError(ProjectError):
    """A versioned file does not declare a version where expected."""


class UnknownVersionedFileError(ProjectError):
    """The type of a versioned file cannot be determined from its name."""

    def __init__(self, path: Path) -> None:
        super().__init__(
            f"Unknown versioned file {path.name}",
            hint="Supported files are pyproject.toml, package.json, Cargo.toml and go.mod",
        )
        self.path = path


class InconsistentVersionsError(ProjectError):
    """Two files of the same package disagree on the current version."""

    def __init__(self, first: Path, first_version: str, second: Path, second_version: str) -> None:
        super().__init__(
            f"Found inconsistent versions in package: {first} had {first_version} "
            f"and {second} had {second_version}",
            hint="All files in a package must have the same version",
        )
        self.first = first
        self.second = second


class NoPackagesError(BumpwrightError):
    """No package is defined and none could be discovered."""

    def __init__(self, message: str = "No packages are defined") -> None:
        super().__init__(
            message,
            hint="Add [tool.bumpwright.package] with versioned_files to pyproject.toml",
        )


class TooManyPackagesError(BumpwrightError):
    """An operation that needs exactly one package found several."""

    def __init__(self) -> None:
        super().__init__(
            "This operation only works for a single package",
            hint="Use prepare-release for projects with multiple packages",
        )


class GoModError(ProjectError):
    """Base class for go.mod module line problems."""


class MissingModuleLineError(GoModError):
    """go.mod has no module line."""


class MalformedModuleLineError(GoModError):
    """go.mod has a module line without a module path."""

    def __init__(self, line: str) -> None:
        super().__init__(f"Malformed module line in go.mod: {line!r}")
        self.line = line


# =============================================================================
# Changesets
# =============================================================================


class ChangesetLoadingError(BumpwrightError):
    """A change file in the changeset directory is malformed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(
            f"Could not load change file {path}: {reason}",
            hint="This could be a file-system issue or a problem with the formatting of a change file.",
        )
        self.path = path


# =============================================================================
# Releases
# =============================================================================


class NoReleaseError(BumpwrightError):
    """No package has any change that warrants a release."""

    def __init__(self) -> None:
        super().__init__(
            "No new releases to prepare",
            hint="Add conventional commits (feat:, fix:) or change files to trigger a release",
        )


# =============================================================================
# Git
# =============================================================================


class GitError(BumpwrightError):
    """A git command failed."""

    def __init__(self, message: str, *, stderr: str | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr


class NotAGitRepoError(GitError):
    """The project path is not inside a git work tree."""
