"""File discovery utilities."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Iterable, Iterator, Optional

from .models import ScannedFile

_TRAILING_DIGITS = re.compile(r"(\d+)$")


def _is_hidden(path: Path) -> bool:
    return any(part.startswith(".") for part in path.parts if part not in (".", ".."))


def extract_sequence_number(path: Path) -> Optional[int]:
    """Return the trailing digits of the file stem as an integer.

    ``_MG_1001.CR2`` yields 1001, ``MVI_0042.MP4`` yields 42 and a stem without
    trailing digits yields None.
    """
    match = _TRAILING_DIGITS.search(path.stem)
    if match is None:
        return None
    return int(match.group(1))


class DirectoryScanner:
    """Discover camera media files within a directory tree."""

    def __init__(
        self,
        *,
        extensions: Iterable[str] = ("cr2", "mp4"),
        follow_symlinks: bool = True,
        include_hidden: bool = False,
    ) -> None:
        self.extensions = {ext.lower().lstrip(".") for ext in extensions}
        self.follow_symlinks = follow_symlinks
        self.include_hidden = include_hidden

    def scan(self, root: Path) -> list[ScannedFile]:
        """Return matching files under root sorted by sequence number.

        Files without a sequence number sort last; ties keep discovery order.
        """
        root = root.expanduser().resolve()
        if not root.is_dir():
            return []

        files: list[ScannedFile] = []
        for path in self._iter_paths(root):
            if not path.is_file():
                continue
            if path.suffix.lower().lstrip(".") not in self.extensions:
                continue
            if not self.include_hidden and _is_hidden(path.relative_to(root)):
                continue
            files.append(ScannedFile(path=path, sequence_number=extract_sequence_number(path)))

        files.sort(key=lambda item: (item.sequence_number is None, item.sequence_number or 0))
        return files

    def _iter_paths(self, root: Path) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(root, followlinks=self.follow_symlinks):
            dirnames.sort()
            base = Path(dirpath)
            for name in sorted(filenames):
                yield base / name


__all__ = ["DirectoryScanner", "extract_sequence_number"]
