"""Configuration models describing cardtransfer settings."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class CardTransferBaseModel(BaseModel):
    """Shared configuration for cardtransfer Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class TransferOptions(CardTransferBaseModel):
    """Settings that govern session grouping and the copy loop.

    Attributes:
        gap_hours: Minimum gap between consecutive files that starts a new session.
        buffer_size_kb: Size of the intermediate copy buffer in KiB.
        preserve_timestamps: Whether to copy source modification times onto copies.
        state_filename: Name of the persisted transfer state file.
    """

    gap_hours: float = Field(default=6.0, gt=0)
    buffer_size_kb: int = Field(default=256, gt=0)
    preserve_timestamps: bool = True
    state_filename: str = ".cardtransfer-state.json"


class ScanOptions(CardTransferBaseModel):
    """Options governing source discovery.

    Attributes:
        extensions: File extensions (without dot, case-insensitive) to pick up.
        follow_symlinks: Whether to traverse symbolic links.
        include_hidden: Whether hidden files and directories are included.
    """

    extensions: List[str] = Field(default_factory=lambda: ["cr2", "mp4"])
    follow_symlinks: bool = True
    include_hidden: bool = False


class LoggingSettings(CardTransferBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class CLIOptions(CardTransferBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class CardTransferConfig(CardTransferBaseModel):
    """Top-level configuration struct for cardtransfer.

    Attributes:
        transfer: Grouping and copy settings.
        scan: Source discovery settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    transfer: TransferOptions = Field(default_factory=TransferOptions)
    scan: ScanOptions = Field(default_factory=ScanOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "CardTransferBaseModel",
    "TransferOptions",
    "ScanOptions",
    "LoggingSettings",
    "CLIOptions",
    "CardTransferConfig",
]
