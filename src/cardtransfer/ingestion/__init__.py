"""Source discovery and capture timestamp extraction."""

from .discovery import DirectoryScanner, extract_sequence_number
from .errors import MetadataError
from .extractors import MetadataExtractor
from .models import IngestionResult, ScannedFile, TimedFile
from .pipeline import IngestionPipeline

__all__ = [
    "DirectoryScanner",
    "IngestionPipeline",
    "IngestionResult",
    "MetadataError",
    "MetadataExtractor",
    "ScannedFile",
    "TimedFile",
    "extract_sequence_number",
]
