"""Main entry point and CLI for exrates."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from exrates.config import settings
from exrates.api import BitcoinAverageClient, CoinMarketCapClient
from exrates.data import RateAggregator, load_rates
from exrates.data.symbols import PINNED_SYMBOL_IDS, pinned_ids_json
from exrates.data.validator import find_missing_symbols
from exrates.writers import RATES_KEY, build_writers


console = Console()


def build_aggregator() -> RateAggregator:
    """Wire the configured providers and writers into an aggregator.

    CoinMarketCap is listed last so its quotes override BitcoinAverage's.
    """
    fetchers = [
        BitcoinAverageClient(),
        CoinMarketCapClient(),
    ]
    return RateAggregator(fetchers=fetchers, writers=build_writers(settings))


async def run_fetch() -> int:
    """Run a single aggregation."""
    aggregator = build_aggregator()
    try:
        data = await aggregator.run_once()
    except Exception as e:
        console.print(f"[red]ticker failed: {e}[/red]")
        return 1

    console.print(f"[green]Snapshot published ({len(data)} bytes) to {len(aggregator.writers)} writer(s)[/green]")
    return 0


async def run_engine() -> None:
    """Run the polling loop."""
    aggregator = build_aggregator()
    try:
        await aggregator.run()
    finally:
        aggregator.stop()


def render_rates(path: Path) -> Table:
    """Build a rich table of a snapshot file."""
    rates = load_rates(path.read_bytes())

    table = Table(title=f"Rates ({len(rates)} symbols)")
    table.add_column("Symbol", style="cyan")
    table.add_column("Type")
    table.add_column("Ask", justify="right")
    table.add_column("Bid", justify="right")
    table.add_column("Last", justify="right")

    for symbol in sorted(rates):
        quote = rates[symbol]
        table.add_row(symbol, quote.kind.value, quote.ask, quote.bid, quote.last)

    return table


@click.group()
@click.version_option(version="0.1.0", prog_name="exrates")
def cli():
    """exrates - exchange-rate aggregator."""
    pass


@cli.command()
def fetch():
    """Fetch, merge and publish one snapshot."""
    sys.exit(asyncio.run(run_fetch()))


@cli.command()
def run():
    """Start the polling loop."""
    try:
        asyncio.run(run_engine())
    except KeyboardInterrupt:
        console.print("\n[yellow]Shutting down...[/yellow]")


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path), required=False)
def show(path: Path | None):
    """Show a published snapshot as a table."""
    path = path or Path(settings.out_path) / RATES_KEY
    if not path.exists():
        console.print(f"[red]No snapshot at {path}[/red]")
        sys.exit(1)

    console.print(render_rates(path))

    missing = find_missing_symbols(load_rates(path.read_bytes()), settings.required_symbols)
    if missing:
        console.print(f"[yellow]Missing required symbols: {', '.join(missing)}[/yellow]")


@cli.command()
def whitelist():
    """Print the pinned symbol id whitelist."""
    click.echo(pinned_ids_json().decode("utf-8"))


@cli.command()
def status():
    """Show current configuration."""
    console.print("\n[bold cyan]exrates Status[/bold cyan]\n")
    console.print(f"Base symbol: {settings.base_symbol}")
    console.print(f"Required symbols: {', '.join(settings.required_symbols)}")
    console.print(f"Pinned symbols: {len(PINNED_SYMBOL_IDS)}")
    console.print(f"Poll interval: {settings.poll_interval}s")

    console.print("\n[bold cyan]Providers[/bold cyan]")
    console.print(f"BitcoinAverage: {'Configured' if settings.btcavg_pubkey and settings.btcavg_privkey else 'Not configured'}")
    console.print(f"CoinMarketCap: {settings.cmc_endpoint} ({'key set' if settings.cmc_api_key else 'no key'})")

    console.print("\n[bold cyan]Writers[/bold cyan]")
    console.print(f"Filesystem: {settings.out_path or 'Disabled'}")
    console.print(f"S3: {f's3://{settings.aws_s3_bucket} ({settings.aws_s3_region})' if settings.s3_configured else 'Disabled'}")
    console.print()


if __name__ == "__main__":
    cli()
