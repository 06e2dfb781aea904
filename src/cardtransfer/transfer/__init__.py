"""Resumable transfer engine."""

from .engine import DEFAULT_BUFFER_SIZE, TransferEngine
from .errors import TransferError
from .models import TransferEvent, TransferResult
from .progress import NullProgress, ProgressSink, RichProgress

__all__ = [
    "DEFAULT_BUFFER_SIZE",
    "NullProgress",
    "ProgressSink",
    "RichProgress",
    "TransferEngine",
    "TransferError",
    "TransferEvent",
    "TransferResult",
]
