#!/usr/bin/env python3
"""
CLI for the ingestion service

Commands:
    scrape-games     - Scrape the schedule, enrich with odds, store snapshot
    scrape-rankings  - Scrape men's and women's D1 polls, store snapshot
    status           - Show last run / last error per domain and cache info
    clear-cache      - Remove games:, rankings: and scrape: snapshots

Usage:
    python cli.py scrape-games
    python cli.py scrape-rankings --json
    python cli.py status
    python cli.py clear-cache --yes

Schedule from cron, e.g. every 30 minutes:
    */30 * * * * cd backend && python cli.py scrape-games
"""

import asyncio
import json
import sys

import click

from scrapers.models.status import DOMAINS
from scrapers.utils.text import to_iso


def get_runtime():
    """Build the ingestion runtime from the environment."""
    from app import configure_logging
    from config import Config
    from services.runtime import build_runtime

    configure_logging(Config.LOG_LEVEL)
    return build_runtime()


def _report(outcome, counts, output_json):
    payload = {"ok": True, "stale": outcome.stale, "ranAt": to_iso(outcome.ran_at), **counts}
    if outcome.error:
        payload["error"] = outcome.error

    if output_json:
        click.echo(json.dumps(payload, indent=2))
    else:
        colour = "yellow" if outcome.stale else "green"
        click.secho("STALE (served last snapshot)" if outcome.stale else "OK", fg=colour, bold=True)
        for name, value in counts.items():
            click.echo(f"  {name}: {value}")
        if outcome.error:
            click.secho(f"  Error: {outcome.error}", fg="red")

    # Stale runs exit 1
    if outcome.stale:
        sys.exit(1)


@click.group()
@click.version_option(version="1.0.0", prog_name="lacrosse-ingest")
def cli():
    """College Lacrosse ingestion CLI - scrape, inspect and reset snapshots."""
    pass


@cli.command("scrape-games")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def scrape_games(output_json):
    """Scrape the schedule and store the snapshot."""
    runtime = get_runtime()
    outcome = asyncio.run(runtime.coordinator.scrape_games())
    _report(outcome, {"count": len(outcome.data)}, output_json)


@cli.command("scrape-rankings")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def scrape_rankings(output_json):
    """Scrape both D1 polls and store the snapshot."""
    runtime = get_runtime()
    outcome = asyncio.run(runtime.coordinator.scrape_rankings())
    payload = outcome.data
    _report(outcome, {
        "mensCount": len(payload.mens) if payload else 0,
        "womensCount": len(payload.womens) if payload else 0,
    }, output_json)


@cli.command("status")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def status(output_json):
    """Show scrape status and cache info."""
    runtime = get_runtime()
    scrape_status = runtime.coordinator.get_status().to_dict()
    cache_status = runtime.cache.status()

    if output_json:
        click.echo(json.dumps({"status": scrape_status, "cache": cache_status}, indent=2))
        return

    click.echo("=" * 60)
    click.secho("SCRAPE STATUS", fg="cyan", bold=True)
    click.echo("=" * 60)
    for domain in DOMAINS:
        last_run = scrape_status[f"{domain}LastRun"] or "never"
        last_error = scrape_status[f"{domain}LastError"]
        click.echo(f"  {domain:<9} last run: {last_run}")
        if last_error:
            click.secho(f"  {'':<9} last error: {last_error}", fg="red")
    click.echo()
    click.echo(f"  Cache: {cache_status['mode']} ({cache_status['keyCount']} keys)")


@cli.command("clear-cache")
@click.option("--yes", is_flag=True, help="Skip confirmation")
def clear_cache(yes):
    """Remove scraped snapshots (click counters are kept)."""
    from utils import cache_key

    if not yes:
        click.confirm(f"Clear {', '.join(cache_key.CLEARABLE_PREFIXES)} keys?", abort=True)

    runtime = get_runtime()
    removed = sum(runtime.cache.clear_prefix(prefix) for prefix in cache_key.CLEARABLE_PREFIXES)
    click.secho(f"Removed {removed} keys", fg="green")


if __name__ == "__main__":
    cli()
