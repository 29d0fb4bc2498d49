from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape

from rtquery.config import get_settings
from rtquery.domain.models import EMPTY_QUERY_RECORD
from rtquery.domain.serialization import load_query_records
from rtquery.errors import RTQueryError
from rtquery.filters.jsonpath import JsonPathFilter
from rtquery.orchestrator import filter_logs
from rtquery.reporter import print_filter_summary, print_queries
from rtquery.utils.logging import configure_logging

app = typer.Typer(help="Saved real-time queries: inspect them and filter JSON logs with them.")


def _setup_logging() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


def _queries_path(queries: Optional[Path]) -> Path:
    return queries or Path(get_settings().queries_file)


def _fail(exc: RTQueryError) -> NoReturn:
    Console(stderr=True).print(f"[red]Error:[/red] {escape(str(exc))}")
    raise typer.Exit(code=1)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    capacity = (
        "unlimited"
        if settings.queue_capacity_bytes < 0
        else f"{settings.queue_capacity_bytes:,} bytes"
    )
    typer.echo(
        f"env={settings.app_env} | queries={settings.queries_file} | capacity={capacity} | "
        f"fields(message={settings.log_message_field}, hostname={settings.log_hostname_field}, "
        f"tags={settings.log_tags_field}, timestamp={settings.log_timestamp_field})"
    )


@app.command()
def template() -> None:
    """
    Print the default (empty) saved query as JSON.
    """
    typer.echo(json.dumps(EMPTY_QUERY_RECORD.to_dict(), indent=2))


@app.command()
def show(
    queries: Optional[Path] = typer.Option(
        None,
        "--queries",
        "-q",
        help="Saved query JSON file (default from QUERIES_FILE).",
    ),
) -> None:
    """
    List saved queries as a table.
    """
    _setup_logging()
    try:
        records = load_query_records(_queries_path(queries))
    except RTQueryError as exc:
        _fail(exc)
    print_queries(records)


def _default_filters(
    drop: Optional[List[str]], keep_unmatched: bool
) -> Optional[List[JsonPathFilter]]:
    if drop:
        return [JsonPathFilter(expression) for expression in drop]
    return [] if keep_unmatched else None


@app.command(name="filter")
def filter_command(
    logfile: Path = typer.Argument(..., help="JSON-lines log file to filter."),
    queries: Optional[Path] = typer.Option(
        None,
        "--queries",
        "-q",
        help="Saved query JSON file (default from QUERIES_FILE).",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write matched logs here as JSON lines instead of stdout.",
    ),
    keep_unmatched: bool = typer.Option(
        False,
        "--keep-unmatched",
        help="Keep well-formed logs that match no saved query.",
    ),
    drop: Optional[List[str]] = typer.Option(
        None,
        "--drop",
        help="JSONPath selecting unmatched logs to drop; others are kept. Repeatable.",
    ),
    capacity: Optional[int] = typer.Option(
        None,
        "--capacity",
        help="Buffer capacity in bytes (-1 for unlimited; default from QUEUE_CAPACITY_BYTES).",
    ),
    queue_dir: Optional[Path] = typer.Option(
        None,
        "--queue-dir",
        help="Buffer on disk in this directory instead of memory (default from QUEUE_DIR).",
    ),
    json_summary: bool = typer.Option(
        False,
        "--json",
        help="Print the run summary as JSON instead of a table.",
    ),
) -> None:
    """
    Keep the log lines matched by any saved query.
    """
    _setup_logging()
    try:
        records = load_query_records(_queries_path(queries))
        default_filters = _default_filters(drop, keep_unmatched)
        with logfile.open("rb") as f:
            result = filter_logs(
                f,
                records,
                default_filters=default_filters,
                capacity_bytes=capacity,
                queue_dir=queue_dir,
            )
    except RTQueryError as exc:
        _fail(exc)
    except OSError as exc:
        Console(stderr=True).print(
            f"[red]Error:[/red] cannot read {escape(str(logfile))}: {exc.strerror}"
        )
        raise typer.Exit(code=1)

    matched_lines = "".join(json.dumps(event) + "\n" for event in result["matched_logs"])
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(matched_lines, encoding="utf-8")
    else:
        typer.echo(matched_lines, nl=False)

    summary = {k: v for k, v in result.items() if k != "matched_logs"}
    if json_summary:
        typer.echo(json.dumps(summary, indent=2), err=output is None)
    else:
        print_filter_summary(result, console=Console(stderr=output is None))


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
