"""Implementation of the 'bump' and 'current-version' commands.

Both work on a project with exactly one package.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from bumpwright.config import load_config, load_packages
from bumpwright.core.mode import Mode
from bumpwright.core.release import bump_version, get_version
from bumpwright.core.version import ConventionalRule, Rule
from bumpwright.exceptions import BumpwrightError, InvalidPrereleaseVersionError
from bumpwright.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console

RULE_NAMES = ("major", "minor", "patch", "release", "pre")


def make_rule(name: str, label: str | None, stable_rule: str = "patch") -> Rule:
    """Build a rule from its command line name.

    Raises:
        InvalidPrereleaseVersionError: If ``pre`` is requested without a label
    """
    if name == "release":
        return Rule.release()
    if name == "pre":
        if not label:
            raise InvalidPrereleaseVersionError("The pre rule needs a prerelease label (--label)")
        return Rule.pre(label, ConventionalRule(stable_rule))
    return Rule.from_conventional(ConventionalRule(name))


def run_bump(
    rule_name: str,
    path: str | None,
    label: str | None,
    execute: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Apply an explicit rule to the project's single package."""
    project_path = Path(path) if path else Path.cwd()
    mode = Mode.apply() if execute else Mode.preview()

    try:
        config = load_config(project_path)
        repo = GitRepository(project_path)
        packages = load_packages(config, repo.path)
        rule = make_rule(rule_name, label or config.prerelease_label)
        version = bump_version(rule, packages, repo.list_tags(), mode)
    except BumpwrightError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    if execute:
        console.print(f"[green]✓[/] Bumped version to [green]{version}[/]")
        return
    for line in mode.recorder.lines:
        console.print(f"  [dim]{line}[/]")


def run_current_version(path: str | None, console: Console, err_console: Console) -> None:
    """Print the current version of the project's single package."""
    project_path = Path(path) if path else Path.cwd()

    try:
        config = load_config(project_path)
        repo = GitRepository(project_path)
        package_version = get_version(load_packages(config, repo.path), repo.list_tags())
    except BumpwrightError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    console.print(str(package_version.latest))
