"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
import structlog

from tests.helpers import FakeRepository, commit, git, tag, write_pyproject


@pytest.fixture
def fake_repo() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def temp_git_repo(tmp_path: Path) -> Path:
    """Create an empty git repository with a committer identity."""
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "--initial-branch=main")
    git(repo, "config", "user.name", "Test")
    git(repo, "config", "user.email", "test@test.com")
    git(repo, "config", "commit.gpgsign", "false")
    git(repo, "config", "tag.gpgsign", "false")
    return repo


@pytest.fixture
def temp_git_repo_with_pyproject(temp_git_repo: Path) -> Path:
    """Git repository with a versioned pyproject.toml, tagged v1.0.0."""
    write_pyproject(temp_git_repo / "pyproject.toml", "1.0.0")
    git(temp_git_repo, "add", ".")
    commit(temp_git_repo, "chore: initial commit")
    tag(temp_git_repo, "v1.0.0")
    return temp_git_repo


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo logging configuration done by CLI invocations."""
    yield
    structlog.reset_defaults()
