"""Transfer state model tracking which source files have been copied."""

from __future__ import annotations

import itertools
import time
from typing import Set

from pydantic import BaseModel, ConfigDict, Field, field_serializer

MAX_TOTAL_BYTES = 2**64 - 1

_ID_COUNTER = itertools.count()


def _new_transfer_id() -> str:
    now = time.time_ns()
    seconds, nanos = divmod(now, 1_000_000_000)
    return f"{seconds:x}-{nanos:x}-{next(_ID_COUNTER):x}"


class TransferState(BaseModel):
    """Durable record of completed files for one logical transfer.

    Attributes:
        transfer_id: Opaque identifier generated when the transfer started.
        completed_files: Keys (source-relative paths) already copied.
        total_files: Number of files the transfer was created for.
        total_bytes: Size of all files the transfer was created for.
    """

    model_config = ConfigDict(extra="ignore")

    transfer_id: str
    completed_files: Set[str] = Field(default_factory=set)
    total_files: int = Field(ge=0)
    total_bytes: int = Field(ge=0, le=MAX_TOTAL_BYTES)

    @classmethod
    def new(cls, total_files: int, total_bytes: int) -> "TransferState":
        """Create a fresh state with nothing completed."""
        return cls(
            transfer_id=_new_transfer_id(),
            total_files=total_files,
            total_bytes=total_bytes,
        )

    def is_completed(self, key: str) -> bool:
        return key in self.completed_files

    def mark_completed(self, key: str) -> None:
        self.completed_files.add(key)

    def all_done(self) -> bool:
        """Return True once at least ``total_files`` keys are completed."""
        return len(self.completed_files) >= self.total_files

    @field_serializer("completed_files")
    def _serialize_completed(self, value: Set[str]) -> list[str]:
        return sorted(value)


__all__ = ["TransferState", "MAX_TOTAL_BYTES"]
