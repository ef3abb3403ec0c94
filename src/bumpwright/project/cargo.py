"""Cargo.toml version manipulation, regex based to keep formatting intact."""

from __future__ import annotations

import re

from bumpwright.exceptions import VersionNotFoundError

_PACKAGE_SECTION = re.compile(r"^\[package\][^\n]*\n.*?(?=^\[|\Z)", re.MULTILINE | re.DOTALL)
_VERSION_LINE = re.compile(r'^(version\s*=\s*)"([^"]+)"', re.MULTILINE)


def get_version(content: str) -> str | None:
    section = _PACKAGE_SECTION.search(content)
    if not section:
        return None
    match = _VERSION_LINE.search(section.group(0))
    return match.group(2) if match else None


def set_version(content: str, new_version: str) -> str:
    """Replace ``[package].version``.

    Raises:
        VersionNotFoundError: If the package table has no version
    """
    section = _PACKAGE_SECTION.search(content)
    if not section or not _VERSION_LINE.search(section.group(0)):
        raise VersionNotFoundError("Could not find [package].version in Cargo.toml")
    updated = _VERSION_LINE.sub(rf'\g<1>"{new_version}"', section.group(0), count=1)
    start, end = section.span()
    return content[:start] + updated + content[end:]
