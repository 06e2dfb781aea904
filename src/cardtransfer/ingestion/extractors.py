"""Capture timestamp extraction for stills and video clips."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from PIL import ExifTags, Image
from pymediainfo import MediaInfo

from .errors import MetadataError

LOGGER = logging.getLogger(__name__)

EXIF_SUFFIXES = frozenset({".cr2", ".jpg", ".jpeg", ".tif", ".tiff"})
VIDEO_SUFFIXES = frozenset({".mp4", ".mov"})
_EXIF_FORMAT = "%Y:%m:%d %H:%M:%S"
# Container dates before the QuickTime epoch mean "unset".
_MIN_CONTAINER_YEAR = 1905


def _parse_exif_datetime(value: object) -> Optional[datetime]:
    if value is None:
        return None
    text = str(value).strip("\x00 ").strip()
    try:
        return datetime.strptime(text, _EXIF_FORMAT)
    except ValueError:
        return None


def _parse_container_datetime(value: Optional[str]) -> Optional[datetime]:
    """Normalize a MediaInfo UTC date string to a naive local datetime."""
    if not value:
        return None
    text = value.strip()
    if text.startswith("UTC "):
        text = text[4:]
    if text.endswith("UTC"):
        text = text[:-3].strip()
    text = text.rstrip("Z")
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.year < _MIN_CONTAINER_YEAR:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone().replace(tzinfo=None)


class MetadataExtractor:
    """Read capture date-times from embedded file metadata."""

    def extract_datetime(self, path: Path) -> datetime:
        """Return the embedded capture date-time for path.

        Stills are read through their EXIF block (``DateTimeOriginal`` first,
        then ``DateTime``); video clips through the container's encoded date.

        Args:
            path: File to inspect.

        Returns:
            datetime: Naive local capture date-time.

        Raises:
            MetadataError: If the file type is unsupported or carries no usable date.
        """
        suffix = path.suffix.lower()
        if suffix in EXIF_SUFFIXES:
            return self._exif_datetime(path)
        if suffix in VIDEO_SUFFIXES:
            return self._container_datetime(path)
        raise MetadataError(f"{path}: unsupported file type '{suffix}'")

    def filesystem_datetime(self, path: Path) -> datetime:
        """Return the filesystem modification time as a naive local datetime."""
        try:
            stat = path.stat()
        except OSError as exc:
            raise MetadataError(f"{path}: cannot stat file: {exc}") from exc
        return datetime.fromtimestamp(stat.st_mtime)

    def _exif_datetime(self, path: Path) -> datetime:
        try:
            with Image.open(path) as img:
                exif = img.getexif()
                original = exif.get_ifd(ExifTags.IFD.Exif).get(ExifTags.Base.DateTimeOriginal)
                fallback = exif.get(ExifTags.Base.DateTime)
        except (OSError, SyntaxError, ValueError) as exc:
            raise MetadataError(f"{path}: cannot read EXIF data: {exc}") from exc

        for candidate in (original, fallback):
            parsed = _parse_exif_datetime(candidate)
            if parsed is not None:
                return parsed
        raise MetadataError(f"{path}: no EXIF date-time field found")

    def _container_datetime(self, path: Path) -> datetime:
        try:
            media_info = MediaInfo.parse(path)
        except (OSError, RuntimeError, ValueError) as exc:
            raise MetadataError(f"{path}: cannot read container metadata: {exc}") from exc

        for track in media_info.tracks:
            if track.track_type != "General":
                continue
            for value in (track.encoded_date, track.tagged_date):
                parsed = _parse_container_datetime(value)
                if parsed is not None:
                    return parsed
        raise MetadataError(f"{path}: container creation time is missing")


__all__ = ["MetadataExtractor", "EXIF_SUFFIXES", "VIDEO_SUFFIXES"]
