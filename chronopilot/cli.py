"""Typer based command line entry points for ChronoPilot reports."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import typer

from chronopilot.core.errors import ChronoPilotError, ConfigError
from chronopilot.core.logger import get_logger, set_level
from chronopilot.core.pipeline import ReportPipeline, render_one, report_style
from chronopilot.core.profiles import SourceSettings, get_profile, load_profiles
from chronopilot.services.source.base import source_from_config
from chronopilot.services.source.files import frame_to_rows, read_frame
from chronopilot_pdf import Dataset

ROLLOVER_RPC = "data_rollover"
FREIZEITKONTO_RPC = "update_monthly_freizeitkonto"

app = typer.Typer(help="Monthly PDF reports for ChronoPilot time tracking data.")


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise typer.BadParameter("date must be in YYYY-MM-DD format") from exc


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        help="Set global logging level (e.g. DEBUG/INFO/WARNING).",
    ),
) -> None:
    """Configure global CLI behaviour before executing commands."""

    level_value = getattr(logging, log_level.upper(), None)
    if not isinstance(level_value, int):
        raise typer.BadParameter(f"Unknown log level: {log_level}")
    set_level(level_value)


def _progress(stage: str, detail: str) -> None:
    typer.secho(f"[{stage}] {detail}", fg=typer.colors.BLUE)


@app.command("run")
def cli_run(
    profile: str = typer.Option("monthly", "--profile", "-p", help="Profile name from profiles.yaml"),
    config: Optional[Path] = typer.Option(None, "--config", help="Alternative profiles.yaml"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory for rendered PDFs"),
    mail: bool = typer.Option(True, "--mail/--no-mail", help="Send the rendered reports by email"),
    upload: bool = typer.Option(True, "--upload/--no-upload", help="Upload the rendered reports to storage"),
    keep_local: Optional[bool] = typer.Option(
        None, "--keep-local/--delete-local", help="Override the profile's keep_local setting"
    ),
    on_date: Optional[str] = typer.Option(None, "--date", help="Report date (YYYY-MM-DD); defaults to today"),
) -> None:
    """Render, deliver and archive every table of a profile."""

    logger = get_logger()
    today = _parse_date(on_date)
    try:
        selected = get_profile(profile, config)
        result = ReportPipeline().run(
            selected,
            today=today,
            out_dir=out,
            send_mail=mail,
            upload=upload,
            keep_local=keep_local,
            progress_cb=_progress,
        )
    except ConfigError as exc:
        logger.error("run config_error: %s", exc, exc_info=True)
        typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=2) from exc
    except ChronoPilotError as exc:
        logger.error("run failed: %s", exc, exc_info=True)
        typer.secho(f"Run failed: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc

    typer.echo(f"Rendered documents: {len(result.documents)}")
    for document in result.documents:
        typer.echo(f"  {document.filename}: {document.page_count} pages, {document.row_count} rows")
    if result.skipped:
        typer.echo(f"Skipped tables: {', '.join(sorted(result.skipped))}")
    typer.echo(f"Mail sent: {'yes' if result.mailed else 'no'}")
    typer.echo(f"Uploaded: {len(result.uploaded)}")
    if result.failed:
        for name, reason in result.failed.items():
            typer.secho(f"Render failed for {name}: {reason}", fg=typer.colors.RED)
        raise typer.Exit(code=1)


@app.command("render")
def cli_render(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV, XLSX or JSON export"),
    name: Optional[str] = typer.Option(None, "--name", help="Dataset name; defaults to the file name"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory; defaults to the source directory"),
    legacy_row_metrics: bool = typer.Option(
        False, "--legacy-row-metrics", help="Measure row heights at the fixed legacy wrap width"
    ),
    on_date: Optional[str] = typer.Option(None, "--date", help="Date shown in the title (YYYY-MM-DD)"),
    font: Optional[Path] = typer.Option(None, "--font", help="TrueType font for text outside WinAnsi"),
    font_bold: Optional[Path] = typer.Option(None, "--font-bold", help="Bold TrueType companion of --font"),
) -> None:
    """Render a single exported table to PDF without contacting any service."""

    logger = get_logger()
    dataset_name = name or source.stem
    try:
        frame = read_frame(source)
    except (OSError, ValueError) as exc:
        logger.error("render read_failed: %s", exc, exc_info=True)
        typer.secho(f"Unable to read {source}: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=2) from exc

    dataset = Dataset.from_rows(dataset_name, frame_to_rows(frame))
    try:
        style = report_style(
            str(font.resolve()) if font else None, str(font_bold.resolve()) if font_bold else None
        )
        document = render_one(
            dataset,
            today=_parse_date(on_date) or date.today(),
            legacy_row_metrics=legacy_row_metrics,
            style=style,
        )
    except ConfigError as exc:
        logger.error("render config_error: %s", exc, exc_info=True)
        typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=2) from exc
    except ChronoPilotError as exc:
        logger.error("render failed: %s", exc, exc_info=True)
        typer.secho(f"Render failed: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc

    path = document.write_to(out or source.parent)
    typer.echo(f"{path} ({document.page_count} pages, {document.row_count} rows)")


def _call_rpc(name: str, params: Optional[str] = None) -> None:
    logger = get_logger()
    try:
        payload = json.loads(params) if params else None
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"params must be JSON: {exc}") from exc
    try:
        source = source_from_config(SourceSettings(type="supabase"))
        result = source.call_rpc(name, payload)
    except ConfigError as exc:
        logger.error("rpc config_error: %s", exc, exc_info=True)
        typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=2) from exc
    except ChronoPilotError as exc:
        logger.error("rpc %s failed: %s", name, exc, exc_info=True)
        typer.secho(f"RPC {name} failed: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc
    logger.info("rpc %s completed", name)
    typer.echo(json.dumps(result, ensure_ascii=False, indent=2, default=str))


@app.command("rpc")
def cli_rpc(
    name: str = typer.Argument(..., help="Name of the database function"),
    params: Optional[str] = typer.Option(None, "--params", help="JSON object passed as arguments"),
) -> None:
    """Call a Supabase RPC and print its JSON result."""

    _call_rpc(name, params)


@app.command("rollover")
def cli_rollover() -> None:
    """Roll the month's time entries over (``data_rollover``)."""

    _call_rpc(ROLLOVER_RPC)


@app.command("update-freizeitkonto")
def cli_update_freizeitkonto() -> None:
    """Recalculate the monthly leisure time accounts."""

    _call_rpc(FREIZEITKONTO_RPC)


@app.command("profiles")
def cli_profiles(
    config: Optional[Path] = typer.Option(None, "--config", help="Alternative profiles.yaml"),
) -> None:
    """List configured profiles."""

    try:
        profiles = load_profiles(config)
    except ConfigError as exc:
        typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=2) from exc
    for key, profile in profiles.items():
        tables = len(profile.static_tables)
        dynamic = "+dynamic" if profile.dynamic_tables else ""
        typer.echo(f"{key}\t{profile.display_name}\t{tables} tables{dynamic}\tsource={profile.source.type}")


if __name__ == "__main__":
    app()
