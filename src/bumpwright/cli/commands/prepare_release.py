"""Implementation of the 'prepare-release' command.

The prepare-release command decides the next version of every package and
writes it locally.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.markdown import Markdown
from rich.panel import Panel

from bumpwright.config import load_config, load_packages
from bumpwright.core.mode import Mode
from bumpwright.core.release import prepare_release
from bumpwright.core.version import Version
from bumpwright.exceptions import BumpwrightError, NoReleaseError
from bumpwright.vcs import GitRepository

if TYPE_CHECKING:
    from collections.abc import Sequence

    from rich.console import Console


def parse_overrides(values: Sequence[str]) -> dict[str | None, Version]:
    """Parse ``--override-version`` values.

    A bare version applies to a single package; ``NAME=VERSION`` targets a
    named package.

    Raises:
        VersionParseError: If a version is invalid
    """
    overrides: dict[str | None, Version] = {}
    for value in values:
        name, separator, version = value.rpartition("=")
        overrides[name if separator else None] = Version.parse(version)
    return overrides


def run_prepare_release(
    path: str | None,
    execute: bool,
    version_overrides: Sequence[str],
    prerelease: str | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the prepare-release command.

    Args:
        path: Optional path to project directory
        execute: Whether to actually apply changes
        version_overrides: Manual version overrides (e.g., "2.0.0" or "first=2.0.0")
        prerelease: Pre-release label (e.g., "alpha", "beta", "rc")
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = Path(path) if path else Path.cwd()

    try:
        config = load_config(project_path)
        repo = GitRepository(project_path)
        packages = load_packages(config, repo.path)
        overrides = parse_overrides(version_overrides)
    except BumpwrightError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    mode = Mode.apply() if execute else Mode.preview()
    effective_prerelease = prerelease or config.prerelease_label

    try:
        releases = prepare_release(
            packages,
            repo,
            mode=mode,
            prerelease_label=effective_prerelease,
            changeset_dir=repo.path / config.changesets.directory,
            overrides=overrides,
            custom_rules=config.changesets.custom_rules,
            skip_release_patterns=config.commits.skip_release_patterns,
        )
    except NoReleaseError as e:
        err_console.print(f"[yellow]{e.message}[/]")
        if e.hint:
            err_console.print(f"[dim]{e.hint}[/]")
        raise SystemExit(1) from e
    except BumpwrightError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    mode_str = "[green]EXECUTING[/]" if execute else "[yellow]DRY-RUN[/]"
    for release in releases:
        name = release.package_name or "package"
        console.print(f"\n{mode_str} - {name}: [cyan]{release.previous}[/] -> [green]{release.version}[/]")
        console.print(Markdown(release.notes))

    if not execute:
        actions = "\n".join(f"  • {line}" for line in mode.recorder.lines)
        console.print(
            Panel(
                f"[bold]Would make the following changes:[/]\n\n{actions}",
                title="[yellow]Dry Run Preview[/]",
                border_style="yellow",
            )
        )
        console.print("\n[dim]Run with [cyan]--execute[/] to apply these changes.[/]")
        return

    tags = ", ".join(release.tag for release in releases)
    console.print(
        Panel(
            f"[green]Successfully prepared {len(releases)} release(s)![/]\n\n"
            "Next steps:\n"
            "  1. Review the changes\n"
            "  2. Commit: [cyan]git add . && git commit -m 'chore: prepare release'[/]\n"
            f"  3. Tag: [cyan]{tags}[/]",
            title="[green]Prepare Release Complete[/]",
            border_style="green",
        )
    )
