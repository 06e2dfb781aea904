"""Command line interface for cardtransfer."""

from __future__ import annotations

import difflib
from pathlib import Path
from typing import Any, Sequence

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from cardtransfer.config import (
    CardTransferConfig,
    ConfigError,
    ConfigManager,
)
from cardtransfer.ingestion import (
    DirectoryScanner,
    IngestionPipeline,
    IngestionResult,
    MetadataExtractor,
)
from cardtransfer.logging_config import configure_logging
from cardtransfer.sessions import Session, SessionNamingError, group_into_sessions
from cardtransfer.state import StateRepository, TransferState
from cardtransfer.transfer import (
    NullProgress,
    ProgressSink,
    RichProgress,
    TransferEngine,
    TransferError,
)

console = Console()


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Conditionally print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """

    if quiet and mode != "error":
        return

    important_modes = {"summary", "warning", "error"}
    if summary_only and mode not in important_modes:
        return

    console.print(message)


def _format_summary_line(command: str, root: Path | str, metrics: dict[str, Any]) -> str:
    """Return a consistent summary line for CLI commands."""

    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {root}: {parts}.[/green]"


def _resolve_output_modes(
    ctx: click.Context,
    config: CardTransferConfig,
    *,
    quiet: bool,
    summary_mode: bool,
    json_output: bool,
) -> tuple[bool, bool]:
    """Combine CLI flags with configured defaults into (quiet, summary_only).

    Raises:
        click.ClickException: If the requested modes conflict.
    """

    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default

    if json_output:
        if explicit_quiet and quiet_enabled:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if explicit_summary and summary_only:
            raise click.ClickException("--json cannot be combined with --summary.")
        return False, False

    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )
    return quiet_enabled, summary_only


def _load_config(verbose: bool = False) -> CardTransferConfig:
    manager = ConfigManager()
    manager.ensure_exists()
    config = manager.load()
    configure_logging("INFO" if verbose else config.logging.level)
    return config


def _resolve_gap(gap_hours: float | None, config: CardTransferConfig) -> float:
    gap = gap_hours if gap_hours is not None else config.transfer.gap_hours
    if gap <= 0:
        raise click.ClickException("--gap-hours must be greater than zero.")
    return gap


def _ingest(source_root: Path, config: CardTransferConfig) -> IngestionResult:
    scanner = DirectoryScanner(
        extensions=config.scan.extensions,
        follow_symlinks=config.scan.follow_symlinks,
        include_hidden=config.scan.include_hidden,
    )
    pipeline = IngestionPipeline(scanner=scanner, extractor=MetadataExtractor())
    return pipeline.run(source_root)


def _file_size(path: Path) -> int:
    try:
        return path.stat().st_size
    except OSError:
        return 0


def _sessions_table(sessions: Sequence[Session], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Session")
    table.add_column("Files", justify="right")
    table.add_column("First")
    table.add_column("Last")
    for session in sessions:
        table.add_row(
            session.folder_name,
            str(len(session.files)),
            session.files[0].timestamp.isoformat(sep=" "),
            session.files[-1].timestamp.isoformat(sep=" "),
        )
    return table


def _sessions_payload(sessions: Sequence[Session]) -> list[dict[str, Any]]:
    return [
        {
            "folder_name": session.folder_name,
            "files": [item.path.as_posix() for item in session.files],
            "first": session.files[0].timestamp.isoformat(),
            "last": session.files[-1].timestamp.isoformat(),
        }
        for session in sessions
    ]


def _emit_ingestion_warnings(
    ingestion: IngestionResult, *, quiet: bool, summary_only: bool
) -> None:
    for entry in ingestion.errors:
        _emit_message(
            f"[yellow]Skipped {escape(entry)}[/yellow]",
            mode="warning",
            quiet=quiet,
            summary_only=summary_only,
        )


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="cardtransfer")
def cli() -> None:
    """cardtransfer copies camera media into per-session folders, resuming safely."""


@cli.command()
@click.argument("input_dir", type=click.Path(exists=True, file_okay=False, path_type=str))
@click.argument("output_dir", type=click.Path(file_okay=False, path_type=str))
@click.option(
    "--gap-hours", type=float, help="Gap in hours between files that starts a new session."
)
@click.option("--dry-run", is_flag=True, help="Show what would be copied without copying.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the transfer.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.option("-v", "--verbose", is_flag=True, help="Log informational messages.")
@click.pass_context
def copy(
    ctx: click.Context,
    input_dir: str,
    output_dir: str,
    gap_hours: float | None,
    dry_run: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
    verbose: bool,
) -> None:
    """Copy media from INPUT_DIR into session folders under OUTPUT_DIR.

    Interrupted runs resume where they stopped: files already recorded as
    copied are skipped.
    """

    try:
        config = _load_config(verbose)
        quiet_enabled, summary_only = _resolve_output_modes(
            ctx, config, quiet=quiet, summary_mode=summary_mode, json_output=json_output
        )
        gap = _resolve_gap(gap_hours, config)

        source_root = Path(input_dir).expanduser().resolve()
        target_root = Path(output_dir).expanduser().resolve()
        context = {
            "source_root": source_root.as_posix(),
            "destination_root": target_root.as_posix(),
            "gap_hours": gap,
            "dry_run": dry_run,
        }

        _emit_message(
            escape(f"Scanning {source_root}..."),
            mode="detail",
            quiet=quiet_enabled or json_output,
            summary_only=summary_only,
        )
        ingestion = _ingest(source_root, config)
        if not json_output:
            _emit_ingestion_warnings(ingestion, quiet=quiet_enabled, summary_only=summary_only)

        if not ingestion.files:
            message = (
                "No media files found."
                if ingestion.scanned == 0
                else "No files with readable dates found."
            )
            if json_output:
                console.print_json(
                    data={
                        "context": context,
                        "sessions": [],
                        "counts": {"scanned": ingestion.scanned, "files": 0},
                        "errors": ingestion.errors,
                    }
                )
                return
            _emit_message(message, mode="summary", quiet=quiet_enabled, summary_only=summary_only)
            return

        sessions = group_into_sessions(ingestion.files, gap)
        if not json_output:
            _emit_message(
                _sessions_table(sessions, f"Organized into {len(sessions)} session(s)"),
                mode="detail",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
            if dry_run:
                _emit_message(
                    "[yellow]Dry run: no files will be copied.[/yellow]",
                    mode="warning",
                    quiet=quiet_enabled,
                    summary_only=summary_only,
                )

        repository = StateRepository(config.transfer.state_filename)
        files = [item for session in sessions for item in session.files]
        total_files = len(files)
        total_bytes = sum(_file_size(item.path) for item in files)

        state = repository.load(target_root, source_root)
        if state is None:
            state = TransferState.new(total_files, total_bytes)
        elif state.completed_files:
            _emit_message(
                f"[cyan]Resuming transfer: {len(state.completed_files)}/{total_files} "
                "files already copied.[/cyan]",
                mode="detail",
                quiet=quiet_enabled or json_output,
                summary_only=summary_only,
            )

        if not dry_run:
            try:
                target_root.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise TransferError(
                    f"Could not create output directory {target_root}: {exc}"
                ) from exc

        progress: ProgressSink
        if json_output or quiet_enabled or summary_only:
            progress = NullProgress()
        else:
            progress = RichProgress(console)

        engine = TransferEngine(
            repository,
            buffer_size=config.transfer.buffer_size_kb * 1024,
            preserve_timestamps=config.transfer.preserve_timestamps,
            progress=progress,
        )
        result = engine.transfer(sessions, target_root, source_root, state, dry_run=dry_run)

        cleaned_up = False
        if not dry_run and state.all_done():
            repository.cleanup(target_root, source_root)
            cleaned_up = True

        counts: dict[str, Any] = {
            "scanned": ingestion.scanned,
            "files": total_files,
            "sessions": len(sessions),
            **result.counts(),
            "dropped": len(ingestion.errors),
        }

        if json_output:
            console.print_json(
                data={
                    "context": context,
                    "transfer_id": state.transfer_id,
                    "sessions": _sessions_payload(sessions),
                    "events": [event.model_dump(mode="json") for event in result.events],
                    "counts": counts,
                    "state_cleaned_up": cleaned_up,
                    "errors": ingestion.errors,
                }
            )
            return

        if dry_run and not summary_only:
            for event in result.events:
                if event.kind == "would_copy":
                    _emit_message(
                        escape(f"[dry-run] {event.source} -> {event.destination}"),
                        mode="detail",
                        quiet=quiet_enabled,
                        summary_only=summary_only,
                    )

        if cleaned_up:
            _emit_message(
                "State files cleaned up.",
                mode="detail",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )

        metrics = dict(counts)
        if dry_run:
            metrics["dry_run"] = True
        _emit_message(
            _format_summary_line("Copy", target_root, metrics),
            mode="summary",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
    except click.ClickException as exc:
        _handle_cli_error(exc.message, code="cli_error", json_output=json_output, original=exc)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
    except SessionNamingError as exc:
        _handle_cli_error(
            str(exc), code="session_naming_error", json_output=json_output, original=exc
        )
    except TransferError as exc:
        _handle_cli_error(
            f"Transfer aborted: {exc}",
            code="transfer_error",
            json_output=json_output,
            original=exc,
        )


@cli.command()
@click.argument("input_dir", type=click.Path(exists=True, file_okay=False, path_type=str))
@click.option(
    "--gap-hours", type=float, help="Gap in hours between files that starts a new session."
)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the sessions.")
@click.option("-v", "--verbose", is_flag=True, help="Log informational messages.")
def sessions(input_dir: str, gap_hours: float | None, json_output: bool, verbose: bool) -> None:
    """Preview how files under INPUT_DIR would be grouped into sessions."""

    try:
        config = _load_config(verbose)
        gap = _resolve_gap(gap_hours, config)
        source_root = Path(input_dir).expanduser().resolve()
        ingestion = _ingest(source_root, config)
        grouped = group_into_sessions(ingestion.files, gap)

        if json_output:
            console.print_json(
                data={
                    "source_root": source_root.as_posix(),
                    "gap_hours": gap,
                    "sessions": _sessions_payload(grouped),
                    "errors": ingestion.errors,
                }
            )
            return

        _emit_ingestion_warnings(ingestion, quiet=False, summary_only=False)
        if not grouped:
            console.print("No files with readable dates found.")
            return
        console.print(_sessions_table(grouped, f"{len(grouped)} session(s) in {source_root}"))
    except click.ClickException as exc:
        _handle_cli_error(exc.message, code="cli_error", json_output=json_output, original=exc)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
    except SessionNamingError as exc:
        _handle_cli_error(
            str(exc), code="session_naming_error", json_output=json_output, original=exc
        )


@cli.command()
@click.argument("output_dir", type=click.Path(exists=True, file_okay=False, path_type=str))
@click.option(
    "--input",
    "input_dir",
    type=click.Path(file_okay=False, path_type=str),
    help="Source directory to check when the destination holds no state.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit status information as JSON.")
def status(output_dir: str, input_dir: str | None, json_output: bool) -> None:
    """Show the resumable transfer state recorded for OUTPUT_DIR."""

    try:
        config = _load_config()
        repository = StateRepository(config.transfer.state_filename)
        candidates = [Path(output_dir).expanduser().resolve()]
        if input_dir:
            candidates.append(Path(input_dir).expanduser().resolve())

        state = repository.load(*candidates)
        if state is None:
            raise click.ClickException(
                f"No resumable transfer state found in {', '.join(map(str, candidates))}."
            )

        completed = len(state.completed_files)
        if json_output:
            console.print_json(
                data={
                    **state.model_dump(mode="json"),
                    "completed": completed,
                    "all_done": state.all_done(),
                }
            )
            return

        console.print(f"Transfer {state.transfer_id}")
        console.print(f"  Completed: {completed}/{state.total_files} files")
        console.print(f"  Total size: {state.total_bytes} bytes")
        if state.all_done():
            console.print("[green]All files copied; state will be removed on the next run.[/green]")
    except click.ClickException as exc:
        _handle_cli_error(exc.message, code="cli_error", json_output=json_output, original=exc)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)


@cli.group()
def config() -> None:
    """Manage cardtransfer configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Args:
        no_env: If True, ignore environment-derived overrides.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="YAML literal to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist one setting given as SECTION.FIELD, e.g. transfer.gap_hours.

    Args:
        key: Dotted ``section.field`` name of the setting.
        value: YAML-literal value to write into the configuration file.

    Raises:
        click.ClickException: If the key is unknown or the value is invalid.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        before = manager.read_text().splitlines()
        manager.set_value(key, value)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    after = manager.read_text().splitlines()

    diff = list(
        difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )
    if not diff:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {key.strip()}.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
