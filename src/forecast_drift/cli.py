"""Typer CLI: forecast-drift fetch, compare, history, search, prune."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import httpx
import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="forecast-drift",
    help="Track how weather forecasts change between fetches",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Show debug logging on stderr",
    ),
) -> None:
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _print_diff(diff, output: str, snapshot_count: int | None = None) -> None:
    from forecast_drift.config import get_settings
    from forecast_drift.diff.formatters import format_json, format_table

    if output == "json":
        console.print_json(format_json(diff))
        return
    settings = get_settings()
    format_table(
        diff,
        console,
        temperature_unit=settings.temperature_unit,
        wind_unit=settings.wind_unit,
        time_format=settings.time_format,
        snapshot_count=snapshot_count,
    )


@app.command()
def fetch(
    location: str = typer.Argument(help='Place name or "lat, lon"'),
    mode: Optional[str] = typer.Option(
        None, "--mode", "-m",
        help="Comparison mode: hourly or daily (default from settings)",
    ),
    output: str = typer.Option(
        "table", "--output", "-o",
        help="Output format: table, json",
    ),
) -> None:
    """Fetch a fresh forecast, store it and show what changed since the last one."""

    async def _run() -> None:
        from forecast_drift.pipeline import refresh_forecast, resolve_location

        resolved = await resolve_location(location)
        if resolved is None:
            console.print(f"[red]No location found for '{location}'[/red]")
            raise typer.Exit(1)

        try:
            result = await refresh_forecast(resolved, mode)
        except httpx.HTTPStatusError as exc:
            console.print(f"[red]Forecast API returned HTTP {exc.response.status_code}[/red]")
            raise typer.Exit(1)
        except httpx.TimeoutException:
            console.print("[red]Forecast API timed out[/red]")
            raise typer.Exit(1)
        except ValueError as exc:
            console.print(f"[red]{exc}[/red]")
            raise typer.Exit(1)

        console.print(f"[dim]Location id: {resolved.id}[/dim]")
        _print_diff(result.diff, output, snapshot_count=len(result.snapshots))

    asyncio.run(_run())


@app.command()
def compare(
    location_id: Optional[str] = typer.Argument(
        None, help="Stored location id (default: last fetched location)",
    ),
    mode: Optional[str] = typer.Option(
        None, "--mode", "-m",
        help="Comparison mode: hourly or daily (default from settings)",
    ),
    output: str = typer.Option(
        "table", "--output", "-o",
        help="Output format: table, json",
    ),
) -> None:
    """Compare the two newest stored snapshots without fetching."""

    async def _run() -> None:
        from forecast_drift.pipeline import compare_stored
        from forecast_drift.snapshots.store import SnapshotStore

        store = SnapshotStore()
        target = location_id
        if target is None:
            last = await store.get_last_location()
            if last is None:
                console.print("[yellow]No location fetched yet. Run 'forecast-drift fetch' first.[/yellow]")
                raise typer.Exit(1)
            target = last.id
            console.print(f"[dim]Comparing {last.name} ({last.id})[/dim]")

        try:
            diff = await compare_stored(target, mode, store=store)
        except ValueError as exc:
            console.print(f"[red]{exc}[/red]")
            raise typer.Exit(1)

        _print_diff(diff, output)

    asyncio.run(_run())


@app.command()
def history(
    location_id: Optional[str] = typer.Argument(
        None, help="Stored location id (omit to list stored locations)",
    ),
) -> None:
    """Show stored snapshots for a location, or every stored location."""

    async def _run() -> None:
        from forecast_drift.common.timefmt import format_date_time
        from forecast_drift.config import get_settings
        from forecast_drift.snapshots.store import SnapshotStore

        store = SnapshotStore()
        time_format = get_settings().time_format

        if location_id is None:
            locations = await store.list_locations()
            if not locations:
                console.print("[yellow]No snapshots stored yet.[/yellow]")
                return
            table = Table(title="Stored Locations", show_lines=True)
            table.add_column("Location ID", width=24)
            table.add_column("Snapshots", justify="right", width=10)
            table.add_column("Latest", width=20)
            for loc_id, count, latest in locations:
                table.add_row(loc_id, str(count), format_date_time(latest, time_format))
            console.print(table)
            return

        snapshots = await store.get_snapshots(location_id)
        if not snapshots:
            console.print(f"[yellow]No snapshots stored for '{location_id}'[/yellow]")
            return

        name = snapshots[0].location.name if snapshots[0].location else location_id
        table = Table(title=f"Snapshots for {name}", show_lines=True)
        table.add_column("#", justify="right", width=3)
        table.add_column("Fetched", width=16)
        table.add_column("Provider", width=12)
        table.add_column("Hrs/Days", justify="right", width=8)
        table.add_column("Alerts", justify="right", width=6)
        table.add_column("Units", width=14)

        for i, snap in enumerate(snapshots, 1):
            alerts = str(len(snap.normalized.alerts))
            if snap.source_meta.alerts_status != "ok":
                alerts = "n/a"
            table.add_row(
                str(i),
                format_date_time(snap.fetched_at, time_format),
                snap.provider.forecast.name,
                f"{len(snap.normalized.hourly)}/{len(snap.normalized.daily)}",
                alerts,
                f"{snap.units.display_temperature}/{snap.units.display_wind}",
            )

        console.print(table)

    asyncio.run(_run())


@app.command()
def search(
    query: str = typer.Argument(help="Place name to search for"),
) -> None:
    """Search for locations by name."""

    async def _run() -> None:
        from forecast_drift.weather.geocoding import search_locations

        results = await search_locations(query)
        if not results:
            console.print(f"[yellow]No locations found for '{query}'[/yellow]")
            return

        table = Table(title=f"Locations matching '{query}'", show_lines=True)
        table.add_column("Location ID", width=22)
        table.add_column("Name", no_wrap=False)
        table.add_column("Lat", justify="right", width=9)
        table.add_column("Lon", justify="right", width=10)
        for loc in results:
            table.add_row(loc.id, loc.name, f"{loc.latitude:.4f}", f"{loc.longitude:.4f}")
        console.print(table)

    asyncio.run(_run())


@app.command()
def prune(
    limit: Optional[int] = typer.Option(
        None, "--limit", "-l",
        help="Snapshots to keep per location, 3-50 (default from settings)",
    ),
) -> None:
    """Apply the retention limit to every stored location."""

    async def _run() -> None:
        from forecast_drift.config import get_settings
        from forecast_drift.snapshots.store import SnapshotStore, clamp_retention

        effective = clamp_retention(limit if limit is not None else get_settings().retention_limit)
        kept = await SnapshotStore().apply_retention_limit(effective)
        console.print(
            f"[bold]Retention limit {effective}:[/bold] "
            f"{sum(kept.values())} snapshot(s) kept across {len(kept)} location(s)"
        )

    asyncio.run(_run())


if __name__ == "__main__":
    app()
