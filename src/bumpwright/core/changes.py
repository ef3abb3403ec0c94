"""Change descriptions shared by commits and change files."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from bumpwright.core.version import ConventionalRule


class ChangeSource(Enum):
    COMMIT = "commit"
    CHANGESET = "changeset"


@dataclass(frozen=True)
class ChangeType:
    """The kind of a change: breaking, feature, fix, or a custom type.

    Change files spell the built-in kinds ``major``, ``minor`` and ``patch``;
    any other word is a custom type which only affects the version when a
    severity is configured for it.
    """

    name: str

    BREAKING_NAME = "major"
    FEATURE_NAME = "minor"
    FIX_NAME = "patch"

    @classmethod
    def breaking(cls) -> ChangeType:
        return cls(cls.BREAKING_NAME)

    @classmethod
    def feature(cls) -> ChangeType:
        return cls(cls.FEATURE_NAME)

    @classmethod
    def fix(cls) -> ChangeType:
        return cls(cls.FIX_NAME)

    @classmethod
    def custom(cls, name: str) -> ChangeType:
        return cls(name)

    @property
    def is_custom(self) -> bool:
        return self.name not in _BUILT_IN

    def rule(self, custom_rules: Mapping[str, ConventionalRule] | None = None) -> ConventionalRule | None:
        """The severity of this change type, if it has one."""
        built_in = _BUILT_IN.get(self.name)
        if built_in is not None:
            return built_in
        return (custom_rules or {}).get(self.name)

    def __str__(self) -> str:
        return self.name


_BUILT_IN = {
    ChangeType.BREAKING_NAME: ConventionalRule.MAJOR,
    ChangeType.FEATURE_NAME: ConventionalRule.MINOR,
    ChangeType.FIX_NAME: ConventionalRule.PATCH,
}


@dataclass(frozen=True)
class Change:
    """A single change pending release for a package.

    Attributes:
        change_type: Kind of change
        summary: Free text, a commit description or a change file summary
        source: Where the change came from
        unique_id: Id of the change file, for changes from change files
    """

    change_type: ChangeType
    summary: str
    source: ChangeSource = ChangeSource.COMMIT
    unique_id: str | None = None


def most_severe_change(
    changes: list[Change], custom_rules: Mapping[str, ConventionalRule] | None = None
) -> ConventionalRule | None:
    """Return the most severe rule among a list of changes."""
    return ConventionalRule.most_severe(*(change.change_type.rule(custom_rules) for change in changes))
