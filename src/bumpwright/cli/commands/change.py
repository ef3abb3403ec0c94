"""Implementation of the 'add-change' command."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from bumpwright.config import load_config
from bumpwright.core.changes import ChangeType
from bumpwright.core.changesets import DEFAULT_CHANGESET_PACKAGE_NAME, ChangesetEntry, write_change_file
from bumpwright.core.mode import Mode
from bumpwright.exceptions import BumpwrightError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from rich.console import Console


def parse_versioning(values: Sequence[str]) -> dict[str, ChangeType]:
    """Parse ``--package`` values of the form ``[NAME=]TYPE``."""
    versioning = {}
    for value in values:
        name, separator, change_type = value.rpartition("=")
        versioning[name if separator else DEFAULT_CHANGESET_PACKAGE_NAME] = ChangeType(change_type)
    return versioning


def run_add_change(
    summary: str,
    package_values: Sequence[str],
    path: str | None,
    console: Console,
    err_console: Console,
) -> None:
    """Write a new change file into the changeset directory."""
    project_path = Path(path) if path else Path.cwd()

    try:
        config = load_config(project_path)
    except BumpwrightError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    heading = summary if summary.startswith("#") else f"# {summary}"
    entry = ChangesetEntry.from_summary(heading, parse_versioning(package_values))
    written = write_change_file(project_path / config.changesets.directory, entry, Mode.apply())
    console.print(f"[green]✓[/] Created change file {written}")
