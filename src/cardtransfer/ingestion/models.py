"""Data models shared by the ingestion pipeline and session grouping."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class ScannedFile(BaseModel):
    """A media file discovered on the source volume.

    Attributes:
        path: Absolute path to the file.
        sequence_number: Trailing counter parsed from the file stem, if any.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    sequence_number: Optional[int] = Field(default=None, ge=0)


class TimedFile(BaseModel):
    """A source file paired with its capture timestamp.

    Attributes:
        path: Absolute path to the file.
        timestamp: Naive local capture date-time.
        sequence_number: Camera counter used to order files with equal timestamps.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    timestamp: datetime
    sequence_number: Optional[int] = Field(default=None, ge=0)

    @property
    def order_key(self) -> Tuple[datetime, bool, int]:
        """Sort key ordering by timestamp, then sequence number (missing last)."""
        return (
            self.timestamp,
            self.sequence_number is None,
            self.sequence_number if self.sequence_number is not None else 0,
        )


class IngestionResult(BaseModel):
    """Aggregated output of an ingestion run.

    Attributes:
        scanned: Number of files the scanner reported.
        files: Files with a usable timestamp, in scanner order.
        fallbacks: Files whose timestamp came from the filesystem.
        errors: Messages for files dropped from processing.
    """

    scanned: int = 0
    files: List[TimedFile] = Field(default_factory=list)
    fallbacks: List[Path] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


__all__ = ["ScannedFile", "TimedFile", "IngestionResult"]
