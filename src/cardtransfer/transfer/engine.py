"""Resumable copy loop that moves session files into their destination folders."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Sequence

from cardtransfer.sessions import Session
from cardtransfer.state import StateError, StateRepository, TransferState, file_key

from .errors import TransferError
from .models import TransferEvent, TransferResult
from .progress import NullProgress, ProgressSink

LOGGER = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 256 * 1024


def _size_or_zero(path: Path) -> int:
    try:
        return path.stat().st_size
    except OSError:
        return 0


class TransferEngine:
    """Copy grouped sessions while keeping transfer state durable.

    A file is marked completed only after its bytes are flushed to disk and the
    state has been written, so an interrupted run leaves the key absent and the
    next run re-copies the file from scratch.
    """

    def __init__(
        self,
        repository: StateRepository,
        *,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        preserve_timestamps: bool = True,
        progress: Optional[ProgressSink] = None,
    ) -> None:
        if buffer_size <= 0:
            raise ValueError("buffer_size must be positive")
        self.repository = repository
        self.buffer_size = buffer_size
        self.preserve_timestamps = preserve_timestamps
        self.progress: ProgressSink = progress or NullProgress()

    def transfer(
        self,
        sessions: Sequence[Session],
        output_root: Path,
        input_root: Path,
        state: TransferState,
        dry_run: bool = False,
    ) -> TransferResult:
        """Copy every not-yet-completed file of every session.

        Args:
            sessions: Named sessions in the order they should be copied.
            output_root: Destination root receiving one folder per session.
            input_root: Source root used to derive completion keys.
            state: Transfer state, mutated as files complete.
            dry_run: When True, report intended copies without touching disk.

        Returns:
            TransferResult: Per-file events for the run.

        Raises:
            TransferError: If a copy or the destination state write fails.
        """
        result = TransferResult(dry_run=dry_run)
        remaining = sum(
            _size_or_zero(item.path)
            for session in sessions
            for item in session.files
            if not state.is_completed(file_key(item.path, input_root))
        )
        self.progress.start(remaining)

        completed = False
        try:
            for session in sessions:
                self._transfer_session(session, output_root, input_root, state, dry_run, result)
            completed = True
        finally:
            self.progress.finish("Transfer complete" if completed else "Transfer aborted")
        return result

    def _transfer_session(
        self,
        session: Session,
        output_root: Path,
        input_root: Path,
        state: TransferState,
        dry_run: bool,
        result: TransferResult,
    ) -> None:
        session_dir = output_root / session.folder_name
        if not dry_run:
            try:
                session_dir.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise TransferError(f"Could not create {session_dir}: {exc}") from exc

        for item in session.files:
            source = item.path
            if not source.name:
                raise TransferError(f"Source path has no file name: {source!s}")
            key = file_key(source, input_root)
            destination = session_dir / source.name

            if state.is_completed(key):
                size = _size_or_zero(source)
                self.progress.advance(size)
                result.events.append(
                    TransferEvent(
                        kind="skipped",
                        session=session.folder_name,
                        source=source,
                        destination=destination,
                        size_bytes=size,
                    )
                )
                continue

            self.progress.message(f"{session.folder_name}/{source.name}")

            if dry_run:
                size = _size_or_zero(source)
                LOGGER.info("[dry-run] %s -> %s", source, destination)
                self.progress.advance(size)
                result.events.append(
                    TransferEvent(
                        kind="would_copy",
                        session=session.folder_name,
                        source=source,
                        destination=destination,
                        size_bytes=size,
                    )
                )
                continue

            copied = self._copy_file(source, destination)
            state.mark_completed(key)
            try:
                self.repository.save_both(state, output_root, input_root)
            except StateError as exc:
                raise TransferError(str(exc)) from exc
            result.events.append(
                TransferEvent(
                    kind="copied",
                    session=session.folder_name,
                    source=source,
                    destination=destination,
                    size_bytes=copied,
                )
            )

    def _copy_file(self, source: Path, destination: Path) -> int:
        buffer = bytearray(self.buffer_size)
        view = memoryview(buffer)
        copied = 0
        try:
            with source.open("rb") as src, destination.open("wb") as dst:
                while True:
                    read = src.readinto(buffer)
                    if not read:
                        break
                    dst.write(view[:read])
                    copied += read
                    self.progress.advance(read)
                dst.flush()
                os.fsync(dst.fileno())
        except OSError as exc:
            raise TransferError(f"Failed to copy {source} -> {destination}: {exc}") from exc

        if self.preserve_timestamps:
            self._copy_times(source, destination)
        return copied

    def _copy_times(self, source: Path, destination: Path) -> None:
        try:
            stat = source.stat()
            os.utime(destination, ns=(stat.st_atime_ns, stat.st_mtime_ns))
        except OSError as exc:
            LOGGER.debug("Could not preserve timestamps on %s: %s", destination, exc)


__all__ = ["TransferEngine", "DEFAULT_BUFFER_SIZE"]
