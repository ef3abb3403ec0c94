"""package.json version manipulation."""

from __future__ import annotations

import json

from bumpwright.exceptions import ProjectError


def _load(content: str) -> dict:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ProjectError(f"Invalid JSON in package.json: {e}") from e
    if not isinstance(data, dict):
        raise ProjectError("package.json must contain a JSON object")
    return data


def get_version(content: str) -> str | None:
    version = _load(content).get("version")
    return version if isinstance(version, str) else None


def set_version(content: str, new_version: str) -> str:
    """Set the top level ``version``, keeping key order."""
    data = _load(content)
    data["version"] = new_version
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
