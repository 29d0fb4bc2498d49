"""
Synthetic data generator for rtquery.

Writes deterministic pseudo-random JSON-lines log events and a matching
saved-query file, handy for trying the `rtquery filter` command and for tests.
"""

from __future__ import annotations

import json
import random
import sys
import time
from pathlib import Path
from typing import List

import typer

from rtquery.domain.models import QueryRecord
from rtquery.domain.serialization import dump_query_records

app = typer.Typer(help="Generate synthetic JSON-lines logs and sample saved queries.")

HOSTNAMES = ["web-1", "web-2", "worker-1", "db-1"]
TAGS = ["prod", "staging", "canary"]
LEVELS = ["DEBUG", "INFO", "WARN", "ERROR"]
MESSAGES = [
    "request completed",
    "connection reset by peer",
    "cache miss",
    "timeout while waiting for upstream",
    "user logged in",
]
BASE_TS_MS = 1_700_000_000_000


def _generate_log_lines(log_path: Path, rows: int, seed: int, span_ms: int = 3_600_000) -> None:
    rng = random.Random(seed)
    with log_path.open("w", encoding="utf-8") as f:
        for i in range(rows):
            event = {
                "@timestamp": BASE_TS_MS + rng.randint(0, span_ms),
                "hostname": rng.choice(HOSTNAMES),
                "tags": rng.sample(TAGS, k=rng.randint(1, 2)),
                "level": rng.choice(LEVELS),
                "message": rng.choice(MESSAGES),
                "seq": i,
            }
            f.write(json.dumps(event) + "\n")


def _sample_queries() -> List[QueryRecord]:
    return [
        QueryRecord.create(
            1,
            "Errors last hour",
            "level:ERROR",
            ["web-1", "web-2"],
            ["prod"],
            BASE_TS_MS,
            BASE_TS_MS + 3_600_000,
        ),
        QueryRecord.create(2, "Timeouts anywhere", "timeout", None, None, 0, 0),
        QueryRecord.create(3, "Canary warnings", "level:WARN", None, ["canary"], 0, 0),
    ]


@app.command()
def main(
    rows: int = typer.Option(
        10_000,
        "--rows",
        "-r",
        help="Number of log events to generate.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    output_dir: Path = typer.Option(
        Path("data"),
        "--output-dir",
        "-o",
        help="Directory receiving logs.jsonl and queries.json.",
    ),
) -> None:
    """
    Generate synthetic logs and sample saved queries.
    """
    start = time.perf_counter()
    output_dir.mkdir(parents=True, exist_ok=True)
    log_path = output_dir / "logs.jsonl"
    queries_path = output_dir / "queries.json"

    typer.echo(f"Generating {rows:,} log events -> {log_path} (seed={seed})")
    _generate_log_lines(log_path, rows=rows, seed=seed)
    dump_query_records(_sample_queries(), queries_path)
    duration = time.perf_counter() - start
    typer.echo(f"Wrote {queries_path} and {log_path} in {duration:.2f}s")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
