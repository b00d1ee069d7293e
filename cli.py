"""
Command-line client for the mention pipeline.

Runs the same aggregation as the ``/api/collect-data`` endpoint, without the
server. Credentials default to the server settings (environment / .env) and
can be overridden per option.
"""

from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table as RichTable

from collectors.aggregator import Aggregator
from collectors.meltwater import collect_csv
from config.defaults import default_config
from config.settings import settings
from core.errors import ConfigurationError
from core.models import MONITORING, CollectionConfig, Mention, Report
from core.tables import humanize_count, time_ago

app = typer.Typer(add_completion=False)
console = Console()


def _setup_logging(level: str | None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO),
        format="%(name)s  %(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_time=False)],
    )


def _build_config(**overrides: str | None) -> CollectionConfig:
    return dataclasses.replace(
        default_config(),
        **{key: value for key, value in overrides.items() if value is not None},
    )


def _audience(mention: Mention) -> int:
    return mention.reach or mention.views or 0


def _print_report(report: Report) -> None:
    table = RichTable(title="Collection summary")
    table.add_column("Source")
    table.add_column("Mentions", justify="right")
    table.add_column("Audience", justify="right")
    table.add_column("Newest")
    for source, items in report.mentions.items():
        newest = max((m.timestamp for m in items), default="")
        table.add_row(
            source,
            str(len(items)),
            humanize_count(sum(_audience(m) for m in items)),
            time_ago(newest) if newest else "-",
        )
    console.print(table)
    for error in report.errors:
        console.print(f"[red]{error}[/red]")


@app.command()
def collect(
    client_name: str | None = typer.Option(None, "--client", "-c", help="Client or brand name."),
    search_terms: str | None = typer.Option(
        None, "--terms", "-t", help="Comma-separated search terms."
    ),
    twitter_bearer_token: str | None = typer.Option(None, "--twitter-token"),
    google_api_key: str | None = typer.Option(None, "--google-key"),
    meltwater_api_key: str | None = typer.Option(None, "--meltwater-key"),
    google_sheets_id: str | None = typer.Option(None, "--sheet-id"),
    source: list[str] | None = typer.Option(
        None, "--source", "-s", help="Restrict to these sources (twitter, news, meltwater)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the full report as JSON."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
):
    """Collect mentions from every configured source."""
    _setup_logging(log_level)
    config = _build_config(
        client_name=client_name,
        search_terms=search_terms,
        twitter_bearer_token=twitter_bearer_token,
        google_api_key=google_api_key,
        meltwater_api_key=meltwater_api_key,
        google_sheets_id=google_sheets_id,
    )
    problems = config.validate(require_credentials=True)
    if problems:
        for problem in problems:
            console.print(f"[red]{problem}[/red]")
        raise typer.Exit(code=2)

    def progress(percent: int, message: str) -> None:
        if not as_json:
            console.print(f"[dim]{percent:3d}%  {message}[/dim]")

    try:
        report = asyncio.run(Aggregator().run(config, sources=source or None, progress=progress))
    except ConfigurationError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2) from exc

    if as_json:
        typer.echo(json.dumps({"data": report.to_dict(), **report.totals}, indent=2))
    else:
        _print_report(report)


@app.command()
def csv(
    path: Path = typer.Argument(..., exists=True, readable=True, help="Meltwater CSV export."),
    search_terms: str | None = typer.Option(
        None, "--terms", "-t", help="Only keep rows mentioning one of these terms."
    ),
    google_api_key: str | None = typer.Option(None, "--google-key"),
    google_sheets_id: str | None = typer.Option(None, "--sheet-id"),
    as_json: bool = typer.Option(False, "--json"),
    log_level: str | None = typer.Option(None, "--log-level"),
):
    """Normalise a Meltwater CSV export and optionally push it to the sheet."""
    _setup_logging(log_level)
    config = _build_config(
        search_terms=search_terms,
        google_api_key=google_api_key,
        google_sheets_id=google_sheets_id,
    )
    mentions = collect_csv(path.read_text(encoding="utf-8-sig"), config)
    errors = asyncio.run(Aggregator().export(config, MONITORING, mentions))

    if as_json:
        typer.echo(json.dumps({"data": [m.to_dict() for m in mentions], "errors": errors}, indent=2))
        return
    console.print(f"{len(mentions)} mentions kept from {path.name}")
    for error in errors:
        console.print(f"[red]{error}[/red]")


if __name__ == "__main__":
    app()
