"""
Pytest configuration for rtquery.

Provides fixtures for:
- Settings isolation (no stray .env or environment overrides)
- Cleanup of the handlers configure_logging installs
- Sample saved queries and log events
- On-disk saved-query and log files for CLI tests
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Generator, List

import pytest

from rtquery.config import get_settings
from rtquery.domain.models import QueryRecord
from rtquery.domain.serialization import dump_query_records

WINDOW_START_MS = 1_700_000_000_000
WINDOW_END_MS = 1_700_003_600_000

_SETTINGS_ENV = (
    "APP_ENV",
    "LOG_LEVEL",
    "LOG_JSON",
    "QUERIES_FILE",
    "QUEUE_CAPACITY_BYTES",
    "QUEUE_DIR",
    "FS_PERCENT_THRESHOLD",
    "QUEUE_GC_INTERVAL_SECONDS",
    "LOG_MESSAGE_FIELD",
    "LOG_HOSTNAME_FIELD",
    "LOG_TAGS_FIELD",
    "LOG_TIMESTAMP_FIELD",
)


@pytest.fixture(autouse=True)
def isolated_settings(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[None, None, None]:
    """
    Run every test from an empty directory with a fresh settings cache.
    """
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def restore_root_logging() -> Generator[None, None, None]:
    """
    Remove the stream handlers configure_logging installs; they point at
    capture streams that are closed once the test ends.
    """
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture()
def errors_query() -> QueryRecord:
    return QueryRecord.create(
        7,
        "Errors last hour",
        "level:ERROR",
        ["web-1", "web-2"],
        ["prod"],
        WINDOW_START_MS,
        WINDOW_END_MS,
    )


@pytest.fixture()
def timeout_query() -> QueryRecord:
    return QueryRecord.create(8, "Timeouts", "timeout", None, None, 0, 0)


@pytest.fixture()
def sample_events() -> List[Dict[str, Any]]:
    """
    Five events: two hit the errors query, one hits the timeout query,
    two hit nothing.
    """
    inside = WINDOW_START_MS + 60_000
    return [
        {"@timestamp": inside, "hostname": "web-1", "tags": ["prod"], "level": "ERROR",
         "message": "disk full"},
        {"@timestamp": inside, "hostname": "web-2", "tags": ["prod", "eu"], "level": "error",
         "message": "connection reset"},
        {"@timestamp": inside, "hostname": "db-1", "tags": ["prod"], "level": "INFO",
         "message": "Timeout while waiting for lock"},
        {"@timestamp": inside, "hostname": "db-1", "tags": ["prod"], "level": "ERROR",
         "message": "replication lag"},
        {"@timestamp": WINDOW_END_MS + 1, "hostname": "web-1", "tags": ["prod"],
         "level": "ERROR", "message": "too late"},
    ]


@pytest.fixture()
def queries_file(tmp_path: Path, errors_query: QueryRecord, timeout_query: QueryRecord) -> Path:
    return dump_query_records([errors_query, timeout_query], tmp_path / "queries.json")


@pytest.fixture()
def log_file(tmp_path: Path, sample_events: List[Dict[str, Any]]) -> Path:
    path = tmp_path / "logs.jsonl"
    lines = [json.dumps(event) for event in sample_events]
    lines.insert(2, "not json at all")
    lines.append("")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
