"""Session grouping tests."""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from cardtransfer.ingestion.models import TimedFile
from cardtransfer.sessions import SessionNamingError, group_into_sessions, name_sessions


def _file(hour: int, seq: int, *, day: int = 15, minute: int = 0) -> TimedFile:
    """Return a timed file shot on January 2024 at the given hour.

    Args:
        hour: Hour of day.
        seq: Camera sequence number, also used in the file name.
        day: Day of month.
        minute: Minute of hour.

    Returns:
        TimedFile: File with a deterministic path and timestamp.
    """
    return TimedFile(
        path=Path(f"/card/DCIM/IMG_{seq:04d}.CR2"),
        timestamp=datetime(2024, 1, day, hour, minute),
        sequence_number=seq,
    )


def test_single_session_uses_bare_date() -> None:
    files = [_file(10, 1), _file(11, 2), _file(12, 3)]

    sessions = group_into_sessions(files, 6.0)

    assert len(sessions) == 1
    assert sessions[0].folder_name == "2024-01-15"
    assert sessions[0].files == files


def test_two_sessions_same_day_get_suffixes() -> None:
    files = [_file(8, 1), _file(9, 2), _file(16, 3), _file(17, 4)]

    sessions = group_into_sessions(files, 6.0)

    assert [session.folder_name for session in sessions] == ["2024-01-15_a", "2024-01-15_b"]
    assert [item.sequence_number for item in sessions[0].files] == [1, 2]
    assert [item.sequence_number for item in sessions[1].files] == [3, 4]


def test_empty_and_single_inputs() -> None:
    assert group_into_sessions([], 6.0) == []

    sessions = group_into_sessions([_file(10, 1)], 6.0)
    assert len(sessions) == 1
    assert sessions[0].folder_name == "2024-01-15"


def test_gap_equal_to_threshold_stays_in_session() -> None:
    files = [_file(8, 1), _file(14, 2)]

    assert len(group_into_sessions(files, 6.0)) == 1
    assert len(group_into_sessions(files, 5.99)) == 2


def test_gap_is_measured_from_previous_file() -> None:
    """A slow trickle of shots never splits even if the session spans days."""
    start = datetime(2024, 1, 15, 0, 0)
    files = [
        TimedFile(path=Path(f"IMG_{i:04d}.CR2"), timestamp=start + timedelta(hours=5 * i))
        for i in range(8)
    ]

    sessions = group_into_sessions(files, 6.0)

    assert len(sessions) == 1
    assert sessions[0].folder_name == "2024-01-15"


def test_gap_property_holds_within_and_between_sessions() -> None:
    offsets = [0, 1, 2, 10, 11, 30, 30, 31, 45, 52]
    start = datetime(2024, 3, 1, 6, 0)
    files = [
        TimedFile(path=Path(f"IMG_{i:04d}.CR2"), timestamp=start + timedelta(hours=offset))
        for i, offset in enumerate(offsets)
    ]
    threshold = 6.0 * 3600

    sessions = group_into_sessions(files, 6.0)

    for session in sessions:
        for left, right in zip(session.files, session.files[1:]):
            assert abs((right.timestamp - left.timestamp).total_seconds()) <= threshold
    for left, right in zip(sessions, sessions[1:]):
        gap = abs((right.files[0].timestamp - left.files[-1].timestamp).total_seconds())
        assert gap > threshold
    assert [item for session in sessions for item in session.files] == files


def test_grouping_is_deterministic_and_names_are_unique() -> None:
    files = [_file(h, i, day=15 + (i % 3)) for i, h in enumerate([1, 9, 17, 2, 10, 18, 3, 11])]

    first = group_into_sessions(files, 2.0)
    second = group_into_sessions(files, 2.0)

    assert [s.model_dump() for s in first] == [s.model_dump() for s in second]
    names = [session.folder_name for session in first]
    assert len(names) == len(set(names))


def test_suffixes_follow_input_order_across_interleaved_dates() -> None:
    files = [_file(8, 1, day=15), _file(12, 2, day=16), _file(20, 3, day=15)]

    sessions = group_into_sessions(files, 2.0)

    assert [session.folder_name for session in sessions] == [
        "2024-01-15_a",
        "2024-01-16",
        "2024-01-15_b",
    ]


def test_more_than_26_sessions_on_one_day_raises() -> None:
    start = datetime(2024, 1, 15, 0, 0)
    files = [
        TimedFile(path=Path(f"IMG_{i:04d}.CR2"), timestamp=start + timedelta(minutes=50 * i))
        for i in range(27)
    ]

    with pytest.raises(SessionNamingError):
        group_into_sessions(files, 0.5)

    assert len(group_into_sessions(files[:26], 0.5)) == 26


def test_non_positive_gap_is_rejected() -> None:
    with pytest.raises(ValueError):
        group_into_sessions([_file(10, 1)], 0)


def test_name_sessions_accepts_plain_runs() -> None:
    runs = [[_file(8, 1)], [_file(9, 2, day=16)]]

    sessions = name_sessions(runs)

    assert [session.folder_name for session in sessions] == ["2024-01-15", "2024-01-16"]


def test_order_key_puts_missing_sequence_last() -> None:
    stamp = datetime(2024, 1, 15, 10, 0)
    numbered = TimedFile(path=Path("IMG_0002.CR2"), timestamp=stamp, sequence_number=2)
    earlier = TimedFile(path=Path("IMG_0001.CR2"), timestamp=stamp, sequence_number=1)
    unnumbered = TimedFile(path=Path("clip.MP4"), timestamp=stamp)

    ordered = sorted([unnumbered, numbered, earlier], key=lambda item: item.order_key)

    assert ordered == [earlier, numbered, unnumbered]
