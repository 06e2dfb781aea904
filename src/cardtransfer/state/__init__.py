"""State persistence helpers for resumable transfers."""

from __future__ import annotations

import logging
import os
from contextlib import suppress
from pathlib import Path, PurePath

from .errors import StateError
from .models import MAX_TOTAL_BYTES, TransferState

LOGGER = logging.getLogger(__name__)

DEFAULT_STATE_FILENAME = ".cardtransfer-state.json"


def file_key(path: PurePath, root: PurePath) -> str:
    """Return the completion key for path: its location relative to root.

    Paths outside root are keyed by the path itself so they still get a
    stable identity.
    """
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


class StateRepository:
    """Persist transfer state next to the source and destination roots."""

    def __init__(self, filename: str = DEFAULT_STATE_FILENAME) -> None:
        """Initialize the repository.

        Args:
            filename: Name of the state file written inside each directory.
        """
        self._filename = filename

    @property
    def filename(self) -> str:
        return self._filename

    def state_path(self, directory: Path) -> Path:
        """Return the state file location inside directory."""
        return directory / self._filename

    def load(self, *directories: Path) -> TransferState | None:
        """Return the first state that parses, trying directories in priority order.

        Missing, unreadable, and malformed state files are skipped.

        Args:
            directories: Candidate directories, most trusted first.

        Returns:
            TransferState | None: Loaded state, or None when no candidate works.
        """
        for directory in directories:
            path = self.state_path(directory)
            try:
                payload = path.read_bytes()
            except FileNotFoundError:
                LOGGER.debug("No transfer state at %s", path)
                continue
            except OSError as exc:
                LOGGER.warning("Could not read transfer state %s: %s", path, exc)
                continue

            # ValidationError subclasses ValueError; undecodable bytes land here too.
            try:
                return TransferState.model_validate_json(payload)
            except ValueError as exc:
                LOGGER.warning("Ignoring malformed transfer state %s: %s", path, exc)
        return None

    def save(self, state: TransferState, directory: Path, *, best_effort: bool) -> None:
        """Write state into directory via a temporary file and an atomic rename.

        Args:
            state: State to serialize.
            directory: Directory receiving the state file.
            best_effort: When True, failures are logged and swallowed.

        Raises:
            StateError: If the write fails and best_effort is False.
        """
        target = self.state_path(directory)
        tmp = directory / f"{self._filename}.tmp.{os.getpid()}"
        data = state.model_dump_json(indent=2)

        try:
            with tmp.open("w", encoding="utf-8") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp, target)
        except OSError as exc:
            with suppress(OSError):
                tmp.unlink()
            if not best_effort:
                raise StateError(f"Could not write transfer state to {directory}: {exc}") from exc
            LOGGER.warning("Could not write transfer state to %s: %s", directory, exc)

    def save_both(self, state: TransferState, required_dir: Path, best_effort_dir: Path) -> None:
        """Persist to the required directory first, then best-effort to the other.

        Raises:
            StateError: If the required write fails; the best-effort write is
                not attempted in that case.
        """
        self.save(state, required_dir, best_effort=False)
        self.save(state, best_effort_dir, best_effort=True)

    def cleanup(self, *directories: Path) -> None:
        """Remove state files from every directory, ignoring errors."""
        for directory in directories:
            with suppress(OSError):
                self.state_path(directory).unlink(missing_ok=True)


__all__ = [
    "StateRepository",
    "DEFAULT_STATE_FILENAME",
    "MAX_TOTAL_BYTES",
    "TransferState",
    "StateError",
    "file_key",
]
