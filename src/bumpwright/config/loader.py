"""Configuration loading from pyproject.toml."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from bumpwright.config.models import BumpwrightConfig
from bumpwright.core.package import Package, find_packages
from bumpwright.exceptions import ConfigNotFoundError, ConfigValidationError, NoPackagesError

TOOL_NAME = "bumpwright"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find pyproject.toml in ``start`` or any of its parents.

    Raises:
        ConfigNotFoundError: If no pyproject.toml exists up to the root
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No pyproject.toml found in {current} or its parents")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Configuration file not found: {path}")
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.bumpwright]`` table, empty when absent."""
    return pyproject.get("tool", {}).get(TOOL_NAME, {})


def load_config(path: Path | None = None) -> BumpwrightConfig:
    """Load configuration for the project at ``path``.

    Returns:
        Validated configuration, defaults when the table is absent

    Raises:
        ConfigNotFoundError: If no pyproject.toml is found
        ConfigValidationError: If the configuration is invalid
    """
    pyproject_path = find_pyproject_toml(path)
    data = extract_config(load_pyproject_toml(pyproject_path))
    try:
        return BumpwrightConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid [tool.{TOOL_NAME}] configuration:\n{e}") from e


def load_packages(config: BumpwrightConfig, root: Path) -> list[Package]:
    """Build the configured packages, or discover one in ``root``.

    Raises:
        NoPackagesError: If nothing is configured and nothing can be discovered
        InconsistentVersionsError: If a package's files disagree on the version
    """
    if config.package is not None:
        return [Package.from_config(config.package, root)]
    if config.packages:
        return [Package.from_config(package, root, name=name) for name, package in config.packages.items()]
    packages = find_packages(root)
    if not packages:
        raise NoPackagesError("No packages are defined and no versioned file was found")
    return packages
