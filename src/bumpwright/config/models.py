"""Configuration models for bumpwright.

Configuration lives in the ``[tool.bumpwright]`` table of pyproject.toml::

    [tool.bumpwright]
    prerelease_label = "rc"

    [tool.bumpwright.packages.first]
    versioned_files = ["first/Cargo.toml"]
    scopes = ["first"]

    [tool.bumpwright.changesets.change_types]
    security = "patch"

A project with a single package may use ``[tool.bumpwright.package]`` instead
of named packages.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from bumpwright.core.commits import DEFAULT_SKIP_RELEASE_PATTERNS
from bumpwright.core.version import ConventionalRule

Severity = Literal["major", "minor", "patch"]


class PackageConfig(BaseModel):
    """One package and the files recording its version."""

    model_config = ConfigDict(extra="forbid")

    versioned_files: list[Path] = Field(default_factory=list)
    scopes: list[str] | None = None
    ignore_go_major_versioning: bool = False


class CommitsConfig(BaseModel):
    """How commits are considered."""

    model_config = ConfigDict(extra="forbid")

    skip_release_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_SKIP_RELEASE_PATTERNS))


class ChangesetConfig(BaseModel):
    """Where change files live and what custom change types mean."""

    model_config = ConfigDict(extra="forbid")

    directory: Path = Path(".changeset")
    change_types: dict[str, Severity] = Field(default_factory=dict)

    @property
    def custom_rules(self) -> dict[str, ConventionalRule]:
        return {name: ConventionalRule(severity) for name, severity in self.change_types.items()}


class BumpwrightConfig(BaseModel):
    """Root configuration."""

    model_config = ConfigDict(extra="forbid")

    package: PackageConfig | None = None
    packages: dict[str, PackageConfig] = Field(default_factory=dict)
    prerelease_label: str | None = None
    commits: CommitsConfig = Field(default_factory=CommitsConfig)
    changesets: ChangesetConfig = Field(default_factory=ChangesetConfig)

    @field_validator("prerelease_label")
    @classmethod
    def _label_has_no_dot(cls, value: str | None) -> str | None:
        if value is not None and (not value or "." in value):
            raise ValueError("prerelease_label must be non-empty and may not contain '.'")
        return value

    @model_validator(mode="after")
    def _single_or_named(self) -> BumpwrightConfig:
        if self.package is not None and self.packages:
            raise ValueError("Use either 'package' or 'packages', not both")
        return self
