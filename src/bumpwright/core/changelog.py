"""Release notes rendering.

Builds the markdown section describing one release from the changes that
produced it. Where the section ends up (a changelog file, a forge release) is
up to the caller.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from bumpwright.core.changes import Change, ChangeSource, ChangeType

if TYPE_CHECKING:
    from collections.abc import Iterable

    from bumpwright.core.version import Version

SECTION_TITLES = {
    ChangeType.breaking(): "### Breaking Changes",
    ChangeType.feature(): "### Features",
    ChangeType.fix(): "### Fixes",
}


def _custom_title(change_type: ChangeType) -> str:
    return f"### {change_type.name.replace('-', ' ').replace('_', ' ').title()}"


def format_change(change: Change) -> str:
    """Format a single change for the changelog.

    Commit descriptions become bullet items. Change file summaries that
    start with a heading keep their body under a level four heading.
    """
    summary = change.summary.strip()
    if change.source is ChangeSource.CHANGESET and summary.startswith("#"):
        heading, _, body = summary.partition("\n")
        lines = [f"#### {heading.lstrip('#').strip()}"]
        if body.strip():
            lines.extend(["", body.strip()])
        return "\n".join(lines)
    return f"- {summary}"


def release_notes(version: Version, changes: Iterable[Change], *, release_date: date | None = None) -> str:
    """Render the release notes for a version.

    Args:
        version: Version being released
        changes: Changes included in the release
        release_date: Date of the release, today (UTC) by default

    Returns:
        Markdown section starting with a ``##`` heading
    """
    release_date = release_date or datetime.now(UTC).date()
    grouped: dict[ChangeType, list[Change]] = {}
    for change in changes:
        grouped.setdefault(change.change_type, []).append(change)

    lines = [f"## {version} ({release_date.isoformat()})"]

    # Built-in sections first, in a fixed order, then custom ones as they appeared
    ordered = [t for t in SECTION_TITLES if t in grouped]
    ordered.extend(t for t in grouped if t not in SECTION_TITLES)

    for change_type in ordered:
        title = SECTION_TITLES.get(change_type) or _custom_title(change_type)
        lines.extend(["", title, ""])
        entries = [format_change(change) for change in grouped[change_type]]
        bullets = [entry for entry in entries if entry.startswith("- ")]
        headed = [entry for entry in entries if not entry.startswith("- ")]
        lines.extend(bullets)
        for entry in headed:
            if lines[-1] != "":
                lines.append("")
            lines.append(entry)

    return "\n".join(lines) + "\n"
