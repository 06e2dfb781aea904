"""Session data models."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from cardtransfer.ingestion.models import TimedFile


class Session(BaseModel):
    """A contiguous run of files copied into one destination folder.

    Attributes:
        folder_name: Destination folder name, unique within one grouping call.
        files: Files in input order.
    """

    folder_name: str
    files: List[TimedFile] = Field(default_factory=list)


__all__ = ["Session"]
