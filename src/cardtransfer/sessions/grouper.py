"""Partition timed files into shooting sessions."""

from __future__ import annotations

import string
from collections import Counter
from typing import Sequence

from cardtransfer.ingestion.models import TimedFile

from .errors import SessionNamingError
from .models import Session

DATE_FORMAT = "%Y-%m-%d"
SUFFIXES = string.ascii_lowercase


def group_into_sessions(files: Sequence[TimedFile], gap_hours: float) -> list[Session]:
    """Split files into sessions wherever consecutive files are too far apart.

    The gap is measured between each file and the one before it in the given
    order, not against the session start, so callers should pass files in
    acquisition order (sequence number). Out-of-order input still yields a
    deterministic partition.

    Args:
        files: Timed files in acquisition order.
        gap_hours: Largest gap, in hours, allowed between files of one session.

    Returns:
        list[Session]: Named sessions in input order.

    Raises:
        ValueError: If gap_hours is not positive.
        SessionNamingError: If a date has more than 26 sessions.
    """
    if gap_hours <= 0:
        raise ValueError(f"gap_hours must be positive, got {gap_hours}")
    if not files:
        return []

    gap_seconds = int(gap_hours * 3600)
    runs: list[list[TimedFile]] = []
    current: list[TimedFile] = [files[0]]

    for item in files[1:]:
        previous = current[-1]
        diff = abs(int((item.timestamp - previous.timestamp).total_seconds()))
        if diff > gap_seconds:
            runs.append(current)
            current = []
        current.append(item)
    runs.append(current)

    return name_sessions(runs)


def name_sessions(runs: Sequence[Sequence[TimedFile]]) -> list[Session]:
    """Assign a folder name to each run of files.

    A date with a single session gets the bare ``YYYY-MM-DD`` name. Dates with
    several sessions get ``_a``, ``_b``, ... suffixes in the order the runs
    appear, which limits one date to 26 sessions.

    Raises:
        SessionNamingError: If a date has more sessions than suffix letters.
    """
    dates = [run[0].timestamp.strftime(DATE_FORMAT) for run in runs]
    date_counts = Counter(dates)
    for date, count in date_counts.items():
        if count > len(SUFFIXES):
            raise SessionNamingError(
                f"{count} sessions start on {date}; at most {len(SUFFIXES)} can be named."
            )

    seen: dict[str, int] = {}
    sessions: list[Session] = []
    for run, date in zip(runs, dates):
        if date_counts[date] == 1:
            folder_name = date
        else:
            index = seen.get(date, 0)
            seen[date] = index + 1
            folder_name = f"{date}_{SUFFIXES[index]}"
        sessions.append(Session(folder_name=folder_name, files=list(run)))
    return sessions


__all__ = ["group_into_sessions", "name_sessions"]
