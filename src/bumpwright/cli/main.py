"""CLI entry point for bumpwright."""

from __future__ import annotations

import click
from rich.console import Console

from bumpwright.cli.commands.bump import RULE_NAMES, run_bump, run_current_version
from bumpwright.cli.commands.change import run_add_change
from bumpwright.cli.commands.prepare_release import run_prepare_release
from bumpwright.logging import configure_logging

console = Console()
err_console = Console(stderr=True)

_PATH_ARGUMENT = click.argument("path", required=False, type=click.Path(exists=True, file_okay=False))
_EXECUTE_OPTION = click.option("--execute", is_flag=True, help="Apply the changes instead of previewing them.")


@click.group()
@click.version_option(package_name="bumpwright")
@click.option("-v", "--verbose", is_flag=True, help="Log every decision to stderr.")
def cli(verbose: bool) -> None:
    """Decide the next semantic version from commits and change files."""
    configure_logging(verbose=verbose)


@cli.command("prepare-release")
@_PATH_ARGUMENT
@_EXECUTE_OPTION
@click.option("--prerelease-label", help="Release a prerelease with this label (e.g. rc).")
@click.option(
    "--override-version",
    "version_overrides",
    multiple=True,
    metavar="[NAME=]VERSION",
    help="Use this version instead of deriving one.",
)
def prepare_release_command(
    path: str | None,
    execute: bool,
    prerelease_label: str | None,
    version_overrides: tuple[str, ...],
) -> None:
    """Bump every package with changes and show its release notes."""
    run_prepare_release(path, execute, version_overrides, prerelease_label, console, err_console)


@cli.command("bump")
@click.argument("rule", type=click.Choice(RULE_NAMES))
@_PATH_ARGUMENT
@click.option("--label", help="Prerelease label for the pre rule.")
@_EXECUTE_OPTION
def bump_command(rule: str, path: str | None, label: str | None, execute: bool) -> None:
    """Apply RULE to the version of a single package project."""
    run_bump(rule, path, label, execute, console, err_console)


@cli.command("current-version")
@_PATH_ARGUMENT
def current_version_command(path: str | None) -> None:
    """Print the current version of a single package project."""
    run_current_version(path, console, err_console)


@cli.command("add-change")
@click.argument("summary")
@click.option(
    "--package",
    "package_values",
    multiple=True,
    required=True,
    metavar="[NAME=]TYPE",
    help="Package affected and its change type (major, minor, patch or custom).",
)
@click.option("--path", type=click.Path(exists=True, file_okay=False), help="Project directory.")
def add_change_command(summary: str, package_values: tuple[str, ...], path: str | None) -> None:
    """Create a change file describing SUMMARY."""
    run_add_change(summary, package_values, path, console, err_console)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
