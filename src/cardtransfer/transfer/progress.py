"""Progress sinks fed by the transfer engine."""

from __future__ import annotations

from typing import Optional, Protocol

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)


class ProgressSink(Protocol):
    """Receives byte progress and status messages; never affects control flow."""

    def start(self, total: int) -> None: ...

    def advance(self, amount: int) -> None: ...

    def message(self, text: str) -> None: ...

    def finish(self, text: str) -> None: ...


class NullProgress:
    """Progress sink that discards every update."""

    def start(self, total: int) -> None:
        pass

    def advance(self, amount: int) -> None:
        pass

    def message(self, text: str) -> None:
        pass

    def finish(self, text: str) -> None:
        pass


class RichProgress:
    """Render transfer progress as a rich byte-count bar."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self._progress = Progress(
            TextColumn("{task.description}", markup=False),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=console,
            transient=False,
        )
        self._task: TaskID | None = None

    def start(self, total: int) -> None:
        self._progress.start()
        self._task = self._progress.add_task("Starting", total=total)

    def advance(self, amount: int) -> None:
        if self._task is not None:
            self._progress.advance(self._task, amount)

    def message(self, text: str) -> None:
        if self._task is not None:
            self._progress.update(self._task, description=text)

    def finish(self, text: str) -> None:
        if self._task is not None:
            self._progress.update(self._task, description=text)
        self._progress.stop()


__all__ = ["ProgressSink", "NullProgress", "RichProgress"]
