"""go.mod module path versioning.

Go modules only record the major version, and only for majors of 2 and up,
as the final segment of the module path::

    module github.com/example/project/v2

go.mod therefore never provides the current version; that comes from tags.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from bumpwright.exceptions import MalformedModuleLineError, MissingModuleLineError

if TYPE_CHECKING:
    from bumpwright.core.version import Version

_MAJOR_SEGMENT = re.compile(r"^v(\d+)$")
_MODULE_KEYWORD = re.compile(r"^module(\s|$)")
# module path, optionally quoted, optionally followed by a comment
_MODULE_LINE = re.compile(r"""^module\s+(?P<quote>"?)(?P<path>[^\s"]+)(?P=quote)\s*(?://.*)?$""")


def get_version(content: str) -> str | None:
    return None


def set_version(content: str, new_version: Version) -> str:
    """Apply the major version suffix rule to the module line.

    Args:
        content: Text of go.mod
        new_version: The version being released

    Returns:
        The updated text, byte-identical when nothing has to change

    Raises:
        MissingModuleLineError: If there is no module line
        MalformedModuleLineError: If the module line has no module path
    """
    if new_version.major in (0, 1):
        return content

    lines = content.splitlines(keepends=True)
    index = next((i for i, line in enumerate(lines) if _MODULE_KEYWORD.match(line)), None)
    if index is None:
        raise MissingModuleLineError("No module line found in go.mod")
    module_line = lines[index]
    match = _MODULE_LINE.match(module_line.rstrip("\r\n"))
    if match is None:
        raise MalformedModuleLineError(module_line.rstrip("\r\n"))
    module = match.group("path")

    segments = module.split("/")
    existing = _MAJOR_SEGMENT.match(segments[-1])
    if existing is not None:
        if int(existing.group(1)) == new_version.major:
            return content
        segments[-1] = f"v{new_version.major}"
    else:
        segments.append(f"v{new_version.major}")

    start, end = match.span("path")
    lines[index] = module_line[:start] + "/".join(segments) + module_line[end:]
    return "".join(lines)
