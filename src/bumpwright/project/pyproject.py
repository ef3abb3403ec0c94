"""pyproject.toml version adapter.

Reads and replaces the static version of a PEP 621 or Poetry project. The
file is edited with targeted regular expressions so comments and key
order outside the version value survive a release.
"""

from __future__ import annotations

import re

from bumpwright.exceptions import VersionNotFoundError

_SECTIONS = (r"project", r"tool\.poetry")
_VERSION_LINE = r'^(version\s*=\s*)["\'][^"\']+["\']'


def _section_pattern(section: str) -> str:
    # The section header up to the next table header or EOF
    return rf"^\[{section}\][^\n]*\n.*?(?=^\[|\Z)"


def get_version(content: str) -> str | None:
    """Get the version from pyproject.toml content.

    Tries PEP 621 ``[project].version`` first, then ``[tool.poetry].version``.

    Args:
        content: Text of the pyproject.toml file

    Returns:
        Version string, or None if neither table declares one
    """
    for section in _SECTIONS:
        section_match = re.search(_section_pattern(section), content, re.MULTILINE | re.DOTALL)
        if not section_match:
            continue
        version_match = re.search(
            r'^version\s*=\s*["\']([^"\']+)["\']',
            section_match.group(0),
            re.MULTILINE,
        )
        if version_match:
            return version_match.group(1)
    return None


def set_version(content: str, new_version: str) -> str:
    """Update the version in pyproject.toml content.

    Only the version value changes; the rest of the text is kept as is.

    Args:
        content: Text of the pyproject.toml file
        new_version: Version to record

    Returns:
        The updated text

    Raises:
        VersionNotFoundError: If neither table declares a static version
    """

    def replace_version(match: re.Match[str]) -> str:
        return re.sub(
            _VERSION_LINE,
            rf'\g<1>"{new_version}"',
            match.group(0),
            count=1,
            flags=re.MULTILINE,
        )

    for section in _SECTIONS:
        section_match = re.search(_section_pattern(section), content, re.MULTILINE | re.DOTALL)
        if not section_match or not re.search(_VERSION_LINE, section_match.group(0), re.MULTILINE):
            continue
        start, end = section_match.span()
        return content[:start] + replace_version(section_match) + content[end:]

    raise VersionNotFoundError(
        "Could not find version to update in pyproject.toml. "
        "Expected [project].version or [tool.poetry].version."
    )
