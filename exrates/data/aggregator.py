"""Multi-provider rate aggregation."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

from rich.console import Console
from rich.markup import escape

from exrates.config import settings
from exrates.data.merge import merge_rates
from exrates.data.models import RateTable, serialize_rates
from exrates.data.validator import validate_rates


console = Console()


class RateFetcher(Protocol):
    """A provider that produces one normalized rate table per call."""

    name: str

    async def fetch(self) -> RateTable: ...


class SnapshotWriter(Protocol):
    """A sink for serialized snapshots."""

    def write(self, data: bytes) -> None: ...


@dataclass
class FetcherHealth:
    """Running fetch statistics for one provider."""

    name: str
    success_count: int = 0
    failure_count: int = 0
    total_latency_ms: float = 0.0
    last_symbol_count: int = 0
    last_error: str | None = None

    @property
    def reliability_score(self) -> float:
        """Share of successful fetches, as a percentage (100 before any fetch)."""
        attempts = self.success_count + self.failure_count
        if attempts == 0:
            return 100.0
        return self.success_count * 100 / attempts

    @property
    def average_latency_ms(self) -> float:
        if self.success_count == 0:
            return 0.0
        return self.total_latency_ms / self.success_count

    def record_success(self, latency_ms: float, symbol_count: int) -> None:
        self.success_count += 1
        self.total_latency_ms += latency_ms
        self.last_symbol_count = symbol_count
        self.last_error = None

    def record_failure(self, error: str) -> None:
        self.failure_count += 1
        self.last_error = error

    def status_line(self) -> str:
        """One-line rich markup summary for the polling log."""
        color = "green" if self.last_error is None else "red"
        line = (
            f"[{color}]{self.name}[/{color}] "
            f"{self.reliability_score:.0f}% ok, "
            f"{self.average_latency_ms:.0f}ms avg, "
            f"{self.last_symbol_count} symbols"
        )
        if self.last_error is not None:
            line += f" (last error: {escape(self.last_error)})"
        return line


class RateAggregator:
    """Fetches every provider, merges, validates and publishes snapshots.

    Fetchers are listed lowest precedence first: when two providers quote the
    same symbol, the later one wins.
    """

    def __init__(
        self,
        fetchers: Sequence[RateFetcher],
        writers: Sequence[SnapshotWriter] = (),
        required_symbols: Sequence[str] | None = None,
        base_symbol: str | None = None,
    ):
        self.fetchers = list(fetchers)
        self.writers = list(writers)
        self.required_symbols = list(
            settings.required_symbols if required_symbols is None else required_symbols
        )
        self.base_symbol = base_symbol or settings.base_symbol

        # Last published snapshot
        self.snapshot: bytes = b"{}"
        self.last_run: datetime | None = None

        self._health: dict[str, FetcherHealth] = {}
        for fetcher in self.fetchers:
            name = self._fetcher_name(fetcher)
            self._health[name] = FetcherHealth(name=name)

        self.running = False

    @staticmethod
    def _fetcher_name(fetcher: RateFetcher) -> str:
        return getattr(fetcher, "name", type(fetcher).__name__)

    async def _timed_fetch(self, fetcher: RateFetcher) -> RateTable:
        """Run one fetcher and record its health."""
        health = self._health[self._fetcher_name(fetcher)]
        start_time = time.time()
        try:
            rates = await fetcher.fetch()
        except Exception as e:
            health.record_failure(str(e) or type(e).__name__)
            raise

        latency_ms = (time.time() - start_time) * 1000
        health.record_success(latency_ms, len(rates))
        return rates

    async def fetch_all(self) -> list[RateTable]:
        """Run all fetchers concurrently and wait for every one of them.

        Raises:
            Exception: The first failure in fetcher order; all tables are
                discarded when any fetcher fails.
        """
        results = await asyncio.gather(
            *(self._timed_fetch(fetcher) for fetcher in self.fetchers),
            return_exceptions=True,
        )

        for result in results:
            if isinstance(result, BaseException):
                raise result

        return list(results)

    def build_snapshot(self, tables: Sequence[RateTable]) -> bytes:
        """Merge provider tables, validate the result and serialize it."""
        rates = merge_rates(tables, base_symbol=self.base_symbol)
        validate_rates(rates, self.required_symbols)
        return serialize_rates(rates)

    def publish(self, data: bytes) -> None:
        """Hand the snapshot to each writer in turn, stopping at the first failure."""
        for writer in self.writers:
            writer.write(data)

    async def run_once(self) -> bytes:
        """Run a single aggregation cycle.

        Returns:
            The serialized snapshot that was published.
        """
        tables = await self.fetch_all()
        data = self.build_snapshot(tables)
        self.publish(data)

        self.snapshot = data
        self.last_run = datetime.now(timezone.utc)
        return data

    async def run(self, poll_interval: int | None = None) -> None:
        """Run the aggregation loop until stopped.

        A failed cycle is reported and the previous snapshot is kept; the
        next attempt happens on the following tick.
        """
        interval = poll_interval if poll_interval is not None else settings.poll_interval
        self.running = True

        console.print("[bold green]Starting rate aggregator[/bold green]")
        console.print(f"[dim]Providers: {', '.join(self._health)}[/dim]")
        console.print(f"[dim]Poll interval: {interval}s[/dim]")

        while self.running:
            try:
                console.print(f"[dim]Fetch started at {datetime.now(timezone.utc).isoformat()}[/dim]")
                data = await self.run_once()
                console.print(f"[green]Published snapshot ({len(data)} bytes)[/green]")
            except Exception as e:
                console.print(f"[red]Error during fetch: {e}[/red]")

            self.print_health()

            if not self.running:
                break
            console.print(f"[dim]Sleeping for {interval}s...[/dim]")
            await asyncio.sleep(interval)

    def stop(self) -> None:
        """Stop the polling loop."""
        self.running = False

    def print_health(self) -> None:
        for health in self._health.values():
            console.print(f"  {health.status_line()}")
