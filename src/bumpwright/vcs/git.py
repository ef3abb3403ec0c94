"""Git access through the git command line.

Only two questions are asked of git: which tags exist, and which commit
messages are new since a given tag. Git computes reachability itself, so
branching and merging history needs no special handling here.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from bumpwright.exceptions import GitError, NotAGitRepoError
from bumpwright.logging import get_logger

logger = get_logger(__name__)

# Written by git for %x1e in the log format; separates messages
_RECORD_SEPARATOR = "\x1e"


class GitRepository:
    """A git work tree.

    Args:
        path: Any directory inside the work tree

    Raises:
        NotAGitRepoError: If the path is not inside a git work tree
    """

    def __init__(self, path: Path) -> None:
        try:
            top_level = self._run(["rev-parse", "--show-toplevel"], cwd=path)
        except GitError as e:
            raise NotAGitRepoError(f"Not a git repository: {path}", stderr=e.stderr) from e
        self.path = Path(top_level.strip())

    @staticmethod
    def _run(args: list[str], cwd: Path) -> str:
        try:
            result = subprocess.run(
                ["git", *args],
                capture_output=True,
                text=True,
                check=True,
                cwd=cwd,
            )
        except FileNotFoundError as e:
            raise GitError("git not found. Install git and make sure it is on PATH.") from e
        except subprocess.CalledProcessError as e:
            raise GitError(
                f"git {' '.join(args)} failed with exit code {e.returncode}",
                stderr=e.stderr,
            ) from e
        return result.stdout

    def run(self, *args: str) -> str:
        return self._run(list(args), cwd=self.path)

    def list_tags(self) -> list[str]:
        """Return every tag name in the repository."""
        return [line for line in self.run("tag", "--list").splitlines() if line]

    def has_commits(self) -> bool:
        try:
            self.run("rev-parse", "--verify", "HEAD")
        except GitError:
            return False
        return True

    def commits_since(self, ref_name: str | None) -> list[str]:
        """Return messages of commits reachable from HEAD and not from ``ref_name``.

        Args:
            ref_name: Tag to exclude history from, or None for all commits

        Returns:
            Full commit messages (subject and body), newest first
        """
        if not self.has_commits():
            return []
        revision = f"{ref_name}..HEAD" if ref_name else "HEAD"
        output = self.run("log", "--format=%B%x1e", revision)
        messages = [message.strip() for message in output.split(_RECORD_SEPARATOR)]
        messages = [message for message in messages if message]
        logger.debug("commits_read", since=ref_name, count=len(messages))
        return messages
