"""Conventional commit parsing and bump rule derivation.

Parses commit messages following the Conventional Commits specification
(https://www.conventionalcommits.org/) and derives the version rule they
warrant:

- ``BREAKING CHANGE:`` footer or ``!`` marker: major
- ``feat``: minor
- ``fix``: patch
- any other type: no rule

The rule for a set of commits is the most severe rule among them, so the
order in which commits are read never changes the result.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bumpwright.core.changes import Change, ChangeSource, ChangeType
from bumpwright.core.version import ConventionalRule
from bumpwright.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

logger = get_logger(__name__)

# type(scope)!: description
COMMIT_PATTERN = re.compile(
    r"^(?P<type>[A-Za-z][\w-]*)"
    r"(?:\((?P<scope>[^()\r\n]+)\))?"
    r"(?P<breaking>!)?"
    r": +(?P<description>\S.*?)\s*$"
)

BREAKING_FOOTER_PATTERN = re.compile(r"^BREAKING[ -]CHANGE: *(?P<value>.*)$")

# Any footer token, e.g. "Refs: #123", "Reviewed-by: Z" or "Fixes #42"
FOOTER_TOKEN_PATTERN = re.compile(r"^(?:BREAKING[ -]CHANGE|[\w-]+)(?:: | #)")

DEFAULT_SKIP_RELEASE_PATTERNS = ("[skip release]", "[release skip]", "[no release]")


@dataclass(frozen=True)
class ParsedCommit:
    """A commit message parsed as a conventional commit.

    Attributes:
        commit_type: Lowercased commit type (e.g. "feat")
        description: Subject text after the colon
        scope: Optional scope in parentheses
        body: Everything after the subject line
        breaking_description: Description of the breaking change, if any.
            This is the footer text when a ``BREAKING CHANGE:`` footer is
            present, otherwise the description when ``!`` was used.
        raw: The original message
    """

    commit_type: str
    description: str
    scope: str | None = None
    body: str = ""
    breaking_description: str | None = None
    raw: str = ""

    @property
    def is_breaking(self) -> bool:
        return self.breaking_description is not None

    @classmethod
    def from_message(cls, message: str) -> ParsedCommit | None:
        """Parse a raw commit message.

        Args:
            message: Full commit message, subject and body

        Returns:
            ParsedCommit, or None if the message is not a conventional commit
        """
        text = message.strip()
        subject, _, body = text.partition("\n")
        match = COMMIT_PATTERN.match(subject)
        if not match:
            return None

        description = match.group("description")
        body = body.strip()
        breaking_description = _breaking_footer(body)
        if breaking_description is None and match.group("breaking"):
            breaking_description = description

        return cls(
            commit_type=match.group("type").lower(),
            description=description,
            scope=match.group("scope"),
            body=body,
            breaking_description=breaking_description,
            raw=message,
        )

    @property
    def rule(self) -> ConventionalRule | None:
        """The rule this commit alone warrants."""
        if self.is_breaking:
            return ConventionalRule.MAJOR
        if self.commit_type == "feat":
            return ConventionalRule.MINOR
        if self.commit_type == "fix":
            return ConventionalRule.PATCH
        return None


def _breaking_footer(body: str) -> str | None:
    lines = body.splitlines()
    for index, line in enumerate(lines):
        match = BREAKING_FOOTER_PATTERN.match(line)
        if not match:
            continue
        value = [match.group("value")]
        for continuation in lines[index + 1 :]:
            if FOOTER_TOKEN_PATTERN.match(continuation):
                break
            value.append(continuation)
        return "\n".join(value).strip()
    return None


def parse_commits(messages: Iterable[str]) -> list[ParsedCommit]:
    """Parse commit messages, skipping those that are not conventional."""
    parsed = []
    for message in messages:
        commit = ParsedCommit.from_message(message)
        if commit is None:
            logger.debug("commit_skipped", message=message.strip().partition("\n")[0])
            continue
        parsed.append(commit)
    return parsed


def filter_skip_release_commits(messages: Iterable[str], patterns: Sequence[str]) -> list[str]:
    """Drop commit messages containing a skip release marker.

    Markers are matched case-insensitively anywhere in the message.

    Args:
        messages: Raw commit messages
        patterns: Markers such as "[skip release]"

    Returns:
        Messages without any marker
    """
    lowered = [pattern.lower() for pattern in patterns]
    return [message for message in messages if not any(p in message.lower() for p in lowered)]


def commit_applies(commit: ParsedCommit, scopes: Sequence[str] | None, consider_scopes: bool) -> bool:
    """Whether a commit counts towards a package.

    Unscoped commits apply to every package. A scoped commit applies to a
    package that lists its scope, or to any package when scopes are not in
    use for this package.
    """
    if not consider_scopes or not scopes or commit.scope is None:
        return True
    return commit.scope in scopes


@dataclass
class ConventionalCommits:
    """The rule and change descriptions derived from a set of commits."""

    rule: ConventionalRule | None = None
    features: list[str] = field(default_factory=list)
    fixes: list[str] = field(default_factory=list)
    breaking_changes: list[str] = field(default_factory=list)

    @classmethod
    def from_commits(cls, commits: Iterable[ParsedCommit]) -> ConventionalCommits:
        result = cls()
        for commit in commits:
            result.rule = ConventionalRule.most_severe(result.rule, commit.rule)

            if commit.breaking_description is not None:
                result.breaking_changes.append(commit.breaking_description)
                if commit.breaking_description == commit.description:
                    # No separate breaking message; don't list the description twice
                    continue

            if commit.commit_type == "feat":
                result.features.append(commit.description)
            elif commit.commit_type == "fix":
                result.fixes.append(commit.description)

        logger.debug("conventional_rule", rule=str(result.rule) if result.rule else None)
        return result

    @classmethod
    def from_commit_messages(
        cls,
        messages: Iterable[str],
        scopes: Sequence[str] | None = None,
        *,
        consider_scopes: bool = False,
    ) -> ConventionalCommits:
        """Parse, filter by scope, and analyse commit messages.

        Args:
            messages: Raw commit messages
            scopes: Scopes declared by the package, if any
            consider_scopes: Whether any package in the run declares scopes

        Returns:
            Analysis of the applicable commits
        """
        selected = [
            commit
            for commit in parse_commits(messages)
            if commit_applies(commit, scopes, consider_scopes)
        ]
        for commit in selected:
            logger.debug("commit_selected", type=commit.commit_type, scope=commit.scope, description=commit.description)
        return cls.from_commits(selected)

    def changes(self) -> list[Change]:
        """Convert to pending changes, breaking changes first."""
        changes = [Change(ChangeType.breaking(), text, ChangeSource.COMMIT) for text in self.breaking_changes]
        changes.extend(Change(ChangeType.feature(), text, ChangeSource.COMMIT) for text in self.features)
        changes.extend(Change(ChangeType.fix(), text, ChangeSource.COMMIT) for text in self.fixes)
        return changes


def calculate_rule(commits: Iterable[ParsedCommit]) -> ConventionalRule | None:
    """Return the most severe rule among parsed commits."""
    return ConventionalRule.most_severe(*(commit.rule for commit in commits))


def get_breaking_changes(commits: Iterable[ParsedCommit]) -> list[ParsedCommit]:
    return [commit for commit in commits if commit.is_breaking]
