"""Semantic version model and bump rules.

Versions follow the ``<major>.<minor>.<patch>[-<label>.<n>]`` format. A
release always sorts above its own prereleases, and prereleases of the same
stable triple compare by ``(label, n)`` with labels compared as plain strings.

Bumping works on :class:`CurrentVersions`, the latest stable version plus an
optional newer prerelease. Versions with a major component of ``0`` shift
every rule down one level:

- :attr:`Rule.major` bumps the minor component
- :attr:`Rule.minor` bumps the patch component
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import total_ordering

from bumpwright.exceptions import InvalidPrereleaseVersionError, VersionParseError

_NUMERIC_RE = re.compile(r"0|[1-9][0-9]*")

# Components are unsigned 64-bit integers
MAX_COMPONENT = 2**64 - 1


@dataclass(frozen=True, order=True)
class StableVersion:
    """The ``major.minor.patch`` triple of a version."""

    major: int = 0
    minor: int = 0
    patch: int = 0

    def __post_init__(self) -> None:
        for part in (self.major, self.minor, self.patch):
            if part < 0:
                raise VersionParseError(str(self), "components must not be negative")
            if part > MAX_COMPONENT:
                raise VersionParseError(str(self), "components must fit in 64 bits")

    def increment_major(self) -> StableVersion:
        return StableVersion(self.major + 1, 0, 0)

    def increment_minor(self) -> StableVersion:
        return StableVersion(self.major, self.minor + 1, 0)

    def increment_patch(self) -> StableVersion:
        return StableVersion(self.major, self.minor, self.patch + 1)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True, order=True)
class Prerelease:
    """The ``label.n`` suffix of a prerelease version (e.g. ``rc.1``)."""

    label: str
    version: int = 0

    def __post_init__(self) -> None:
        if not self.label or "." in self.label:
            raise InvalidPrereleaseVersionError(
                f"Invalid prerelease label {self.label!r}",
                hint="Labels must be non-empty and may not contain '.'",
            )
        if self.version < 0:
            raise InvalidPrereleaseVersionError(f"Invalid prerelease number {self.version}")
        if self.version > MAX_COMPONENT:
            raise VersionParseError(str(self), "prerelease number must fit in 64 bits")

    @classmethod
    def parse(cls, text: str) -> Prerelease:
        parts = text.split(".")
        if len(parts) != 2 or not parts[0] or not _NUMERIC_RE.fullmatch(parts[1]):
            raise VersionParseError(text, "prerelease must look like <label>.<number>")
        return cls(parts[0], int(parts[1]))

    def __str__(self) -> str:
        return f"{self.label}.{self.version}"


@total_ordering
@dataclass(frozen=True)
class Version:
    """A stable version, or a prerelease of a stable version.

    Example:
        >>> v = Version.parse("1.2.3-rc.0")
        >>> v.stable, v.pre
        (StableVersion(major=1, minor=2, patch=3), Prerelease(label='rc', version=0))
        >>> str(v)
        '1.2.3-rc.0'
    """

    stable: StableVersion = field(default_factory=StableVersion)
    pre: Prerelease | None = None

    @classmethod
    def new(cls, major: int, minor: int, patch: int, pre: Prerelease | None = None) -> Version:
        return cls(StableVersion(major, minor, patch), pre)

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a version string.

        Args:
            text: Version string like "1.2.3" or "1.2.3-rc.0"

        Returns:
            Parsed Version

        Raises:
            VersionParseError: If the string is not a valid version
        """
        core, separator, pre_text = text.partition("-")
        parts = core.split(".")
        if len(parts) != 3:
            raise VersionParseError(text, "version must have exactly 3 parts")
        if not all(_NUMERIC_RE.fullmatch(part) for part in parts):
            raise VersionParseError(text, "version components must be non-negative integers without leading zeros")
        stable = StableVersion(int(parts[0]), int(parts[1]), int(parts[2]))
        if not separator:
            return cls(stable)
        try:
            pre = Prerelease.parse(pre_text)
        except InvalidPrereleaseVersionError as e:
            raise VersionParseError(text, e.message) from e
        return cls(stable, pre)

    @property
    def is_prerelease(self) -> bool:
        return self.pre is not None

    @property
    def major(self) -> int:
        return self.stable.major

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        if self.stable != other.stable:
            return self.stable < other.stable
        # A release sorts above every prerelease of the same triple
        if self.pre is None or other.pre is None:
            return self.pre is not None and other.pre is None
        return self.pre < other.pre

    def __str__(self) -> str:
        if self.pre is None:
            return str(self.stable)
        return f"{self.stable}-{self.pre}"


def parse_version(text: str) -> Version:
    """Parse a version string. See :meth:`Version.parse`."""
    return Version.parse(text)


@dataclass(frozen=True)
class CurrentVersions:
    """The latest stable version and, if newer, the latest prerelease."""

    stable: StableVersion = field(default_factory=StableVersion)
    prerelease: Version | None = None

    @property
    def latest(self) -> Version:
        """The prerelease when there is one, otherwise the stable version."""
        if self.prerelease is not None:
            return self.prerelease
        return Version(self.stable)


class ConventionalRule(Enum):
    """Bump severities that can be derived from changes, least severe first."""

    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    @classmethod
    def most_severe(cls, *rules: ConventionalRule | None) -> ConventionalRule | None:
        """Return the most severe rule, ignoring ``None``."""
        present = [rule for rule in rules if rule is not None]
        if not present:
            return None
        return max(present, key=lambda rule: rule.severity)

    def __str__(self) -> str:
        return self.value


_SEVERITY = {
    ConventionalRule.PATCH: 0,
    ConventionalRule.MINOR: 1,
    ConventionalRule.MAJOR: 2,
}


class RuleKind(Enum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    RELEASE = "release"
    PRE = "pre"


@dataclass(frozen=True)
class Rule:
    """A rule for bumping :class:`CurrentVersions`.

    Use the constructors rather than building instances directly::

        Rule.major()
        Rule.release()
        Rule.pre("rc", ConventionalRule.MINOR)
    """

    kind: RuleKind
    label: str | None = None
    stable_rule: ConventionalRule = ConventionalRule.PATCH

    @classmethod
    def major(cls) -> Rule:
        return cls(RuleKind.MAJOR)

    @classmethod
    def minor(cls) -> Rule:
        return cls(RuleKind.MINOR)

    @classmethod
    def patch(cls) -> Rule:
        return cls(RuleKind.PATCH)

    @classmethod
    def release(cls) -> Rule:
        """Promote the current prerelease to a stable version."""
        return cls(RuleKind.RELEASE)

    @classmethod
    def pre(cls, label: str, stable_rule: ConventionalRule = ConventionalRule.PATCH) -> Rule:
        """Create or increment a prerelease targeting ``stable_rule``'s next version."""
        return cls(RuleKind.PRE, label=label, stable_rule=stable_rule)

    @classmethod
    def from_conventional(cls, rule: ConventionalRule) -> Rule:
        return cls(RuleKind(rule.value))

    def __str__(self) -> str:
        if self.kind is RuleKind.PRE:
            return f"pre({self.label}, {self.stable_rule})"
        return self.kind.value


def _bump_stable(stable: StableVersion, kind: RuleKind) -> StableVersion:
    is_0 = stable.major == 0
    if kind is RuleKind.MAJOR and not is_0:
        return stable.increment_major()
    if (kind is RuleKind.MINOR and not is_0) or (kind is RuleKind.MAJOR and is_0):
        return stable.increment_minor()
    return stable.increment_patch()


def bump(current: CurrentVersions, rule: Rule) -> CurrentVersions:
    """Apply a rule to the current versions.

    Primary rules (major, minor, patch) always drop any prerelease. The
    stable version is left untouched by prerelease rules; it only changes
    once the prerelease is promoted with :meth:`Rule.release`.

    Args:
        current: The current stable and prerelease versions
        rule: The rule to apply

    Returns:
        The bumped versions

    Raises:
        InvalidPrereleaseVersionError: If a release is requested without an
            existing prerelease
    """
    if rule.kind is RuleKind.RELEASE:
        if current.prerelease is None:
            raise InvalidPrereleaseVersionError(
                "No prerelease version found, but a Release rule was requested"
            )
        return CurrentVersions(stable=current.prerelease.stable)
    if rule.kind is RuleKind.PRE:
        return _bump_pre(current, rule)
    return CurrentVersions(stable=_bump_stable(current.stable, rule.kind))


def _bump_pre(current: CurrentVersions, rule: Rule) -> CurrentVersions:
    if rule.label is None:
        raise InvalidPrereleaseVersionError("A prerelease rule needs a label")
    next_stable = _bump_stable(current.stable, RuleKind(rule.stable_rule.value))
    existing = current.prerelease
    if (
        existing is not None
        and existing.pre is not None
        and existing.stable == next_stable
        and existing.pre.label == rule.label
    ):
        pre = replace(existing.pre, version=existing.pre.version + 1)
    else:
        pre = Prerelease(rule.label, 0)
    return CurrentVersions(stable=current.stable, prerelease=Version(next_stable, pre))


__all__ = [
    "ConventionalRule",
    "CurrentVersions",
    "Prerelease",
    "Rule",
    "RuleKind",
    "StableVersion",
    "Version",
    "bump",
    "parse_version",
]
