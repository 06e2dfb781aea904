"""Ingestion errors."""


class MetadataError(Exception):
    """Raised when a capture timestamp cannot be determined for a file."""
