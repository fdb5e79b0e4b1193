"""
Program Insights: CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs (``--now``, snapshot path, program id).
  4. Compute (program report, leaderboard, portfolio overview).
  5. Report result to stdout.

Install and run::

    pip install -e .
    program-insights --help
    program-insights validate-config
    program-insights program-report 12 --snapshot data/snapshot.json
    program-insights rank-programs --category cash --top 5
    program-insights portfolio-report --json
    program-insights status-drilldown ongoing
    program-insights most-active --period year --year 2024

``--now`` pins the reference instant (ISO-8601); without it the current UTC
time is used.  With ``--json`` only the JSON document is written to stdout.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="program-insights",
    help="Program lifecycle and performance analytics for assistance programs.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from program_insights.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from program_insights.utils.logging import configure_logging
    configure_logging(config.logging)


def _resolve_now_or_exit(now: Optional[str]) -> datetime:
    from program_insights.utils.time_utils import parse_timestamp, utcnow

    if not now:
        return utcnow()
    parsed = parse_timestamp(now)
    if parsed is None:
        typer.echo(f"[ERROR] Invalid --now timestamp: '{now}'", err=True)
        raise typer.Exit(code=1)
    return parsed


def _load_snapshot_or_exit(snapshot_path: Optional[str], config):
    from program_insights.ingestion.snapshot import load_snapshot

    path = Path(snapshot_path) if snapshot_path else Path(config.data.snapshot_file)
    try:
        return load_snapshot(path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except ValueError as exc:
        typer.echo(f"[ERROR] Snapshot failed validation: {exc}", err=True)
        raise typer.Exit(code=1)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Snapshot file:     {config.data.snapshot_file}")
    typer.echo(f"  Export dir:        {config.data.export_dir}")
    typer.echo(f"  Top N:             {config.analytics.top_n}")
    typer.echo(f"  Growth window:     {config.analytics.growth_window_days}d")
    typer.echo(f"  Activity window:   {config.analytics.activity_window_days}d")
    typer.echo(f"  Default category:  {config.analytics.default_category}")
    typer.echo(f"  Log level:         {config.logging.level}")
    typer.echo(f"  Debug mode:        {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("program-report")
def program_report(
    program_id: str = typer.Argument(..., help="Id of the program to report on."),
    snapshot_path: Optional[str] = typer.Option(
        None,
        "--snapshot",
        help="Snapshot JSON file. Defaults to config.data.snapshot_file.",
    ),
    now: Optional[str] = typer.Option(
        None,
        "--now",
        help="Reference instant (ISO-8601). Defaults to the current UTC time.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
    export_path: Optional[str] = typer.Option(
        None,
        "--export",
        help="Also write the report JSON to this path.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Show metrics, phase timeline, health, efficiency and suggestions for one program."""
    from program_insights.analytics.metrics import beneficiaries_for
    from program_insights.analytics.report import build_program_report
    from program_insights.reporting.export import export_to_json, program_report_to_dict
    from program_insights.reporting.formatters import format_program_report

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    reference = _resolve_now_or_exit(now)
    snapshot = _load_snapshot_or_exit(snapshot_path, config)

    program = snapshot.find_program(program_id)
    if program is None:
        typer.echo(f"[ERROR] Program not found in snapshot: {program_id}", err=True)
        raise typer.Exit(code=1)

    report = build_program_report(
        program,
        beneficiaries_for(program, snapshot.beneficiaries),
        reference,
        activity_window_days=config.analytics.activity_window_days,
    )
    data = program_report_to_dict(report)

    if export_path:
        written = export_to_json(data, Path(export_path))

    if as_json:
        typer.echo(json.dumps(data, indent=2, default=str))
        return

    typer.echo(format_program_report(data))
    if export_path:
        typer.echo(f"\n  Exported: {written}")
    typer.echo("")
    typer.echo("[OK] Report complete.")


@app.command("rank-programs")
def rank_programs_cmd(
    snapshot_path: Optional[str] = typer.Option(
        None,
        "--snapshot",
        help="Snapshot JSON file. Defaults to config.data.snapshot_file.",
    ),
    category: Optional[str] = typer.Option(
        None,
        "--category",
        help="Case-insensitive category substring. Defaults to config.analytics.default_category.",
    ),
    top: Optional[int] = typer.Option(
        None,
        "--top",
        help="Show only the top N programs. Defaults to config.analytics.top_n.",
    ),
    now: Optional[str] = typer.Option(
        None,
        "--now",
        help="Reference instant (ISO-8601). Defaults to the current UTC time.",
    ),
    export_csv: Optional[str] = typer.Option(
        None,
        "--export-csv",
        help="Write the full (unfiltered by --top) leaderboard to this CSV path.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Rank programs by the weighted five-factor score and show the leaderboard."""
    from program_insights.analytics.ranking import rank_programs, top_programs
    from program_insights.reporting.export import (
        RANKING_CSV_COLUMNS,
        export_to_csv,
        flatten_ranking_for_export,
        ranking_to_dict,
    )
    from program_insights.reporting.formatters import format_leaderboard

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    reference = _resolve_now_or_exit(now)

    top_n = top if top is not None else config.analytics.top_n
    if top_n < 1:
        typer.echo(f"[ERROR] --top must be >= 1, got {top_n}.", err=True)
        raise typer.Exit(code=1)

    snapshot = _load_snapshot_or_exit(snapshot_path, config)
    selected = category if category is not None else config.analytics.default_category

    ranked = rank_programs(
        snapshot.programs,
        snapshot.beneficiaries,
        reference,
        category=selected,
        growth_window_days=config.analytics.growth_window_days,
    )

    typer.echo(format_leaderboard(ranking_to_dict(top_programs(ranked, top_n), reference, selected)))

    if export_csv:
        written = export_to_csv(
            flatten_ranking_for_export(ranked),
            Path(export_csv),
            fieldnames=RANKING_CSV_COLUMNS,
        )
        typer.echo(f"\n  Exported {len(ranked)} row(s): {written}")

    typer.echo("")
    typer.echo(f"[OK] Ranked {len(ranked)} program(s).")


@app.command("portfolio-report")
def portfolio_report(
    snapshot_path: Optional[str] = typer.Option(
        None,
        "--snapshot",
        help="Snapshot JSON file. Defaults to config.data.snapshot_file.",
    ),
    now: Optional[str] = typer.Option(
        None,
        "--now",
        help="Reference instant (ISO-8601). Defaults to the current UTC time.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the summary as JSON."),
    export_path: Optional[str] = typer.Option(
        None,
        "--export",
        help="Also write the summary JSON to this path.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Show the portfolio overview: status counts, per-program health, suggestions."""
    from program_insights.analytics.portfolio import build_portfolio_summary
    from program_insights.reporting.export import export_to_json, portfolio_summary_to_dict
    from program_insights.reporting.formatters import format_portfolio_summary

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    reference = _resolve_now_or_exit(now)
    snapshot = _load_snapshot_or_exit(snapshot_path, config)

    summary = build_portfolio_summary(
        snapshot.programs,
        snapshot.beneficiaries,
        reference,
        recent_window_days=config.analytics.activity_window_days,
    )
    data = portfolio_summary_to_dict(summary)

    if export_path:
        written = export_to_json(data, Path(export_path))

    if as_json:
        typer.echo(json.dumps(data, indent=2, default=str))
        return

    typer.echo(format_portfolio_summary(data))
    if export_path:
        typer.echo(f"\n  Exported: {written}")
    typer.echo("")
    typer.echo("[OK] Portfolio report complete.")


@app.command("status-drilldown")
def status_drilldown(
    status: str = typer.Argument(..., help="Effective status: draft, ongoing or complete."),
    snapshot_path: Optional[str] = typer.Option(
        None,
        "--snapshot",
        help="Snapshot JSON file. Defaults to config.data.snapshot_file.",
    ),
    now: Optional[str] = typer.Option(
        None,
        "--now",
        help="Reference instant (ISO-8601). Defaults to the current UTC time.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """List programs in one effective status with payment progress and days in status."""
    from program_insights.analytics.portfolio import programs_by_status
    from program_insights.taxonomy.status import EffectiveStatus

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    valid = [s.value for s in EffectiveStatus]
    if status.lower() not in valid:
        typer.echo(f"[ERROR] status must be one of {valid}, got '{status}'.", err=True)
        raise typer.Exit(code=1)

    reference = _resolve_now_or_exit(now)
    snapshot = _load_snapshot_or_exit(snapshot_path, config)
    rows = programs_by_status(snapshot.programs, snapshot.beneficiaries, status, reference)

    typer.echo("")
    typer.echo(f"=== Programs: {status.lower()} ===")
    if not rows:
        typer.echo("  (no programs in this status)")
    else:
        header = f"  {'Program':<30}  {'Benef':>5}  {'Paid':>5}  {'Paid%':>6}  {'Days':>5}"
        typer.echo(header)
        typer.echo("  " + "-" * (len(header) - 2))
        for r in rows:
            typer.echo(
                f"  {str(r.program_name)[:30]:<30}  {r.beneficiary_count:>5}  "
                f"{r.paid_count:>5}  {r.payment_rate:>6.1f}  {r.days_in_status:>5}"
            )
    typer.echo("")
    typer.echo(f"[OK] {len(rows)} program(s).")


@app.command("most-active")
def most_active(
    period: str = typer.Option("all", "--period", help="all, year or month."),
    year: Optional[int] = typer.Option(None, "--year", help="Calendar year (required unless --period all)."),
    month: int = typer.Option(0, "--month", help="Month 1-12 (with --period month)."),
    snapshot_path: Optional[str] = typer.Option(
        None,
        "--snapshot",
        help="Snapshot JSON file. Defaults to config.data.snapshot_file.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Show the program with the most beneficiaries in a period."""
    from program_insights.analytics.portfolio import most_active_program

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    snapshot = _load_snapshot_or_exit(snapshot_path, config)

    try:
        best = most_active_program(
            snapshot.programs, snapshot.beneficiaries, period=period, year=year, month=month,
        )
    except ValueError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    if not best.name:
        typer.echo("  (no beneficiaries in this period)")
    else:
        typer.echo(f"  Most active: {best.name} ({best.count} beneficiaries)")
    typer.echo("")
    typer.echo("[OK] Done.")


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
