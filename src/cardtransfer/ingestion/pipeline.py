"""High-level ingestion pipeline orchestration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from .discovery import DirectoryScanner
from .errors import MetadataError
from .extractors import MetadataExtractor
from .models import IngestionResult, ScannedFile, TimedFile

LOGGER = logging.getLogger(__name__)


class IngestionPipeline:
    """Coordinate discovery and timestamp extraction to produce timed files."""

    def __init__(
        self,
        scanner: DirectoryScanner,
        extractor: MetadataExtractor,
        on_file: Optional[Callable[[ScannedFile], None]] = None,
    ) -> None:
        self.scanner = scanner
        self.extractor = extractor
        self.on_file = on_file

    def run(self, root: Path) -> IngestionResult:
        """Scan root and resolve a capture timestamp for each discovered file.

        Files whose embedded metadata cannot be read fall back to their
        filesystem modification time; files where even that fails are dropped
        and reported in ``errors``.
        """
        result = IngestionResult()
        scanned = self.scanner.scan(root.expanduser())
        result.scanned = len(scanned)

        for item in scanned:
            if self.on_file is not None:
                self.on_file(item)
            try:
                timestamp = self.extractor.extract_datetime(item.path)
            except MetadataError as exc:
                LOGGER.debug("Falling back to filesystem time: %s", exc)
                try:
                    timestamp = self.extractor.filesystem_datetime(item.path)
                except MetadataError as fallback_exc:
                    LOGGER.warning("Could not read date from %s: %s", item.path, fallback_exc)
                    result.errors.append(f"{item.path}: {fallback_exc}")
                    continue
                result.fallbacks.append(item.path)

            result.files.append(
                TimedFile(
                    path=item.path,
                    timestamp=timestamp,
                    sequence_number=item.sequence_number,
                )
            )

        return result
