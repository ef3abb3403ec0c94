"""Run modes: apply changes, or preview them.

Every operation that mutates the project produces :class:`Action` values and
hands them to a :class:`Mode`. In apply mode they are carried out; in preview
mode (a dry run) a description of each is recorded instead. The decision that
produced the actions never depends on the mode.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bumpwright.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

logger = get_logger(__name__)


@dataclass(frozen=True)
class WriteToFile:
    path: Path
    content: str

    def describe(self) -> str:
        return f"Would write to {self.path}"


@dataclass(frozen=True)
class RemoveFile:
    path: Path

    def describe(self) -> str:
        return f"Would delete: {self.path}"


Action = WriteToFile | RemoveFile


@dataclass
class Recorder:
    """Collects human-readable descriptions of what a dry run would do."""

    lines: list[str] = field(default_factory=list)

    def record(self, line: str) -> None:
        self.lines.append(line)

    def __str__(self) -> str:
        return "\n".join(self.lines)


@dataclass
class Mode:
    """Whether mutations are applied or only previewed.

    Build one with :meth:`apply` or :meth:`preview`.
    """

    recorder: Recorder | None = None

    @classmethod
    def apply(cls) -> Mode:
        return cls(recorder=None)

    @classmethod
    def preview(cls, recorder: Recorder | None = None) -> Mode:
        return cls(recorder=recorder if recorder is not None else Recorder())

    @property
    def dry_run(self) -> bool:
        return self.recorder is not None

    def record(self, line: str) -> None:
        """Record a line in preview mode; a no-op when applying."""
        if self.recorder is not None:
            self.recorder.record(line)

    def execute(self, actions: Iterable[Action]) -> None:
        """Carry out actions, or record them in preview mode.

        Raises:
            OSError: If a file cannot be written or removed
        """
        for action in actions:
            if self.recorder is not None:
                self.recorder.record(action.describe())
                continue
            if isinstance(action, WriteToFile):
                action.path.write_text(action.content)
                logger.debug("file_written", path=str(action.path))
            else:
                action.path.unlink()
                logger.debug("file_removed", path=str(action.path))
