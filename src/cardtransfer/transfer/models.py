"""Result models emitted by the transfer engine."""

from __future__ import annotations

from pathlib import Path
from typing import List, Literal

from pydantic import BaseModel, Field


class TransferEvent(BaseModel):
    """Outcome for a single source file.

    Attributes:
        kind: ``copied`` for real copies, ``skipped`` for files completed in an
            earlier run, ``would_copy`` for dry-run previews.
        session: Destination session folder name.
        source: Source file path.
        destination: Destination file path.
        size_bytes: Bytes copied, or the file size for skipped and planned files.
    """

    kind: Literal["copied", "skipped", "would_copy"]
    session: str
    source: Path
    destination: Path
    size_bytes: int = 0


class TransferResult(BaseModel):
    """Aggregate outcome of a transfer run."""

    dry_run: bool = False
    events: List[TransferEvent] = Field(default_factory=list)

    def _count(self, kind: str) -> int:
        return sum(1 for event in self.events if event.kind == kind)

    @property
    def copied(self) -> int:
        return self._count("copied")

    @property
    def skipped(self) -> int:
        return self._count("skipped")

    @property
    def planned(self) -> int:
        return self._count("would_copy")

    @property
    def bytes_copied(self) -> int:
        return sum(event.size_bytes for event in self.events if event.kind == "copied")

    def counts(self) -> dict[str, int]:
        """Return summary metrics suitable for CLI and JSON output."""
        return {
            "copied": self.copied,
            "skipped": self.skipped,
            "planned": self.planned,
            "bytes_copied": self.bytes_copied,
        }


__all__ = ["TransferEvent", "TransferResult"]
