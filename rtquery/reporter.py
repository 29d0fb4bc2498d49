from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from rtquery.domain.models import QueryRecord
from rtquery.orchestrator import FilterRunResult


def format_epoch_ms(value: int) -> str:
    """Render an epoch-millisecond value as UTC ISO text; 0 reads as unbounded."""
    if value == 0:
        return "-"
    try:
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
    except (OverflowError, OSError, ValueError):
        return str(value)


def format_sequence(values: Optional[Sequence[str]]) -> str:
    """Show absent and empty filters differently."""
    if values is None:
        return "[dim]unset[/dim]"
    if not values:
        return "[dim]empty[/dim]"
    return escape(", ".join(values))


def print_queries(records: Iterable[QueryRecord], console: Optional[Console] = None) -> None:
    """
    Render saved queries as a rich table, ordered by id.
    """
    console = console or Console()
    items = sorted(records, key=lambda r: r.id)
    if not items:
        console.print("[yellow]No saved queries.[/yellow]")
        return

    table = Table(title="Saved Queries", box=box.ROUNDED)
    table.add_column("ID", justify="right", style="magenta")
    table.add_column("Title", style="cyan")
    table.add_column("Query", style="bold")
    table.add_column("Hosts")
    table.add_column("Tags")
    table.add_column("Start (UTC)", style="green")
    table.add_column("End (UTC)", style="green")

    for record in items:
        table.add_row(
            str(record.id),
            escape(record.title),
            escape(record.query) if record.query else "[dim]*[/dim]",
            format_sequence(record.hostname),
            format_sequence(record.tag),
            format_epoch_ms(record.start_date),
            format_epoch_ms(record.end_date),
        )
    console.print(table)


def print_filter_summary(result: FilterRunResult, console: Optional[Console] = None) -> None:
    """
    Render the counters and profile of a filter run.
    """
    console = console or Console()
    table = Table(title="Filter Run", box=box.ROUNDED, show_header=False)
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right", style="magenta")

    table.add_row("Saved queries", f"{result.get('queries', 0):,}")
    table.add_row("Lines received", f"{result.get('received', 0):,}")
    table.add_row("Matched", f"[bold green]{result.get('matched', 0):,}[/bold green]")
    table.add_row("Filtered out", f"{result.get('filtered_out', 0):,}")
    table.add_row("Dropped (buffer full)", f"[yellow]{result.get('dropped', 0):,}[/yellow]")
    table.add_row("Rejected (not JSON)", f"[red]{result.get('rejected', 0):,}[/red]")
    table.add_row("Duration (s)", f"{result.get('duration_seconds', 0.0):.4f}")
    table.add_row("Throughput (lines/s)", f"{result.get('throughput_lines_per_sec', 0.0):,.2f}")

    mem_bytes = result.get("peak_rss_bytes") or 0
    table.add_row("Peak Memory (MB)", f"{mem_bytes / (1024 * 1024):.2f}")
    cpu = result.get("cpu_percent")
    table.add_row("CPU %", f"{cpu:.1f}" if cpu is not None else "N/A")

    console.print(table)


__all__ = ["print_queries", "print_filter_summary", "format_epoch_ms", "format_sequence"]
