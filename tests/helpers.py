"""Helpers for building projects and repositories in tests."""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from bumpwright.core.package import Package
from bumpwright.project.versioned_file import VersionedFile


@dataclass
class FakeRepository:
    """In-memory stand-in for GitRepository.

    ``commits`` maps the tag a query starts from (None for all history) to
    the commit messages returned.
    """

    tags: list[str] = field(default_factory=list)
    commits: dict[str | None, list[str]] = field(default_factory=dict)
    queried: list[str | None] = field(default_factory=list)

    def list_tags(self) -> list[str]:
        return list(self.tags)

    def commits_since(self, ref_name: str | None) -> list[str]:
        self.queried.append(ref_name)
        return list(self.commits.get(ref_name, []))


def write_pyproject(path: Path, version: str, name: str = "test-project") -> Path:
    path.write_text(f'[project]\nname = "{name}"\nversion = "{version}"\n')
    return path


def write_cargo(path: Path, version: str, name: str = "test-crate") -> Path:
    path.write_text(f'[package]\nname = "{name}"\nversion = "{version}"\n')
    return path


def write_package_json(path: Path, version: str, name: str = "test-package") -> Path:
    path.write_text(f'{{\n  "name": "{name}",\n  "version": "{version}"\n}}\n')
    return path


def make_package(
    directory: Path,
    version: str,
    *,
    name: str | None = None,
    scopes: list[str] | None = None,
) -> Package:
    """Create a package backed by a pyproject.toml in its own directory."""
    directory.mkdir(parents=True, exist_ok=True)
    pyproject = write_pyproject(directory / "pyproject.toml", version)
    return Package.new([VersionedFile.load(pyproject)], name=name, scopes=scopes)


def write_changeset(directory: Path, name: str, front_matter: str, summary: str = "# A change") -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{name}.md"
    path.write_text(f"---\n{front_matter}\n---\n\n{summary}\n")
    return path


# =============================================================================
# Real git repositories
# =============================================================================


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def git(path: Path, *args: str) -> str:
    result = subprocess.run(["git", *args], cwd=path, capture_output=True, text=True, check=True)
    return result.stdout


def commit(path: Path, message: str) -> None:
    git(path, "commit", "--allow-empty", "-m", message)


def tag(path: Path, name: str) -> None:
    git(path, "tag", name)
