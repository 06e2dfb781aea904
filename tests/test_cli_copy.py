"""CLI integration tests for `cardtransfer copy`, `sessions`, and `status`."""

from __future__ import annotations

import json
import os
from datetime import datetime
from pathlib import Path

from click.testing import CliRunner

from cardtransfer.cli import cli
from cardtransfer.state import DEFAULT_STATE_FILENAME, StateRepository, TransferState


def _env_with_home(tmp_path: Path) -> dict[str, str]:
    """Return environment variables pointing HOME to a temp directory.

    Args:
        tmp_path: Temporary directory provided by pytest.

    Returns:
        dict[str, str]: Environment mapping with HOME set.
    """
    env = dict(os.environ)
    env["HOME"] = str(tmp_path / "home")
    return env


def _make_card(tmp_path: Path) -> Path:
    """Create a card with two shooting sessions on the same day.

    Raw files carry no readable EXIF block, so their capture times come from
    the modification times set here.
    """
    card = tmp_path / "card"
    for name, hour in (("IMG_0001.CR2", 8), ("IMG_0002.CR2", 9), ("MVI_0003.MP4", 16)):
        path = card / "DCIM" / "100CANON" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(name.encode("utf-8") * 100)
        stamp = datetime(2024, 1, 15, hour).timestamp()
        os.utime(path, (stamp, stamp))
    (card / "DCIM" / "100CANON" / "IMG_0001.THM").write_bytes(b"thumbnail")
    return card


def test_copy_json_copies_and_cleans_up_state(tmp_path: Path) -> None:
    card = _make_card(tmp_path)
    output = tmp_path / "photos"
    runner = CliRunner()

    result = runner.invoke(
        cli, ["copy", str(card), str(output), "--json"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["counts"]["copied"] == 3
    assert payload["counts"]["sessions"] == 2
    assert payload["state_cleaned_up"] is True
    assert [session["folder_name"] for session in payload["sessions"]] == [
        "2024-01-15_a",
        "2024-01-15_b",
    ]
    assert (output / "2024-01-15_a" / "IMG_0001.CR2").exists()
    assert (output / "2024-01-15_a" / "IMG_0002.CR2").exists()
    assert (output / "2024-01-15_b" / "MVI_0003.MP4").exists()
    assert not (output / "2024-01-15_a" / "IMG_0001.THM").exists()
    assert not (output / DEFAULT_STATE_FILENAME).exists()
    assert not (card / DEFAULT_STATE_FILENAME).exists()


def test_copy_resumes_from_saved_state(tmp_path: Path) -> None:
    card = _make_card(tmp_path)
    output = tmp_path / "photos"
    output.mkdir()
    state = TransferState.new(total_files=3, total_bytes=3600)
    state.mark_completed("DCIM/100CANON/IMG_0001.CR2")
    StateRepository().save(state, output, best_effort=False)
    runner = CliRunner()

    result = runner.invoke(
        cli, ["copy", str(card), str(output), "--json"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["transfer_id"] == state.transfer_id
    assert payload["counts"]["skipped"] == 1
    assert payload["counts"]["copied"] == 2
    assert [event["kind"] for event in payload["events"]] == ["skipped", "copied", "copied"]
    assert not (output / "2024-01-15_a" / "IMG_0001.CR2").exists()
    assert payload["state_cleaned_up"] is True


def test_copy_dry_run_creates_nothing(tmp_path: Path) -> None:
    card = _make_card(tmp_path)
    output = tmp_path / "photos"
    runner = CliRunner()

    result = runner.invoke(
        cli, ["copy", str(card), str(output), "--dry-run"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 0, result.output
    assert "Dry run" in result.output
    assert "Copy summary" in result.output
    assert not output.exists()
    assert not (card / DEFAULT_STATE_FILENAME).exists()


def test_copy_summary_mode_prints_summary(tmp_path: Path) -> None:
    card = _make_card(tmp_path)
    output = tmp_path / "photos"
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["copy", str(card), str(output), "--summary", "--gap-hours", "12"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0, result.output
    assert "Copy summary" in result.output
    assert "copied=3" in result.output
    assert "Scanning" not in result.output
    assert (output / "2024-01-15" / "MVI_0003.MP4").exists()


def test_copy_reports_empty_card(tmp_path: Path) -> None:
    card = tmp_path / "empty"
    card.mkdir()
    runner = CliRunner()

    result = runner.invoke(
        cli, ["copy", str(card), str(tmp_path / "photos")], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 0
    assert "No media files found." in result.output
    assert not (tmp_path / "photos").exists()


def test_copy_rejects_non_positive_gap(tmp_path: Path) -> None:
    card = _make_card(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["copy", str(card), str(tmp_path / "photos"), "--gap-hours", "0", "--json"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["error"]["code"] == "cli_error"


def test_sessions_json_previews_grouping(tmp_path: Path) -> None:
    card = _make_card(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, ["sessions", str(card), "--json"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["gap_hours"] == 6.0
    assert [len(session["files"]) for session in payload["sessions"]] == [2, 1]
    assert payload["sessions"][1]["files"][0].endswith("MVI_0003.MP4")


def test_status_reports_saved_state(tmp_path: Path) -> None:
    output = tmp_path / "photos"
    output.mkdir()
    state = TransferState.new(total_files=3, total_bytes=300)
    state.mark_completed("DCIM/100CANON/IMG_0001.CR2")
    StateRepository().save(state, output, best_effort=False)
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["status", str(output), "--json"], env=env)

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["transfer_id"] == state.transfer_id
    assert payload["completed"] == 1
    assert payload["all_done"] is False

    text = runner.invoke(cli, ["status", str(output)], env=env)
    assert "Completed: 1/3 files" in text.output


def test_status_without_state_fails(tmp_path: Path) -> None:
    output = tmp_path / "photos"
    output.mkdir()
    runner = CliRunner()

    result = runner.invoke(cli, ["status", str(output)], env=_env_with_home(tmp_path))

    assert result.exit_code != 0
    assert "No resumable transfer state" in result.output
