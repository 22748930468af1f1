"""Pytest configuration and fixtures."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Callable, Iterator

import pytest
import structlog

from tokentimer.config import reset_settings
from tokentimer.core.service import TimerService
from tokentimer.core.store import TimerStore
from tokentimer.log import LOGGER_NAME


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Point the default database at a temporary directory and reset logging."""
    monkeypatch.setenv("TOKENTIMER_DB_PATH", str(tmp_path / "default" / "timer.db"))
    monkeypatch.setenv("TOKENTIMER_LOG_LEVEL", "ERROR")
    reset_settings()
    yield
    reset_settings()
    logging.getLogger(LOGGER_NAME).handlers.clear()
    structlog.reset_defaults()


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "timer.db"


@pytest.fixture()
def store(db_path: Path) -> Iterator[TimerStore]:
    with TimerStore(db_path) as s:
        yield s


@pytest.fixture()
def service(store: TimerStore) -> TimerService:
    return TimerService(store)


@pytest.fixture()
def write_raw_row(db_path: Path) -> Callable[[object, object], None]:
    """Return a helper that inserts a row directly, bypassing the store.

    Used to plant corrupted data the store itself would never write.
    """

    def _write(token: object, timestamp: object) -> None:
        conn = sqlite3.connect(db_path)
        try:
            conn.execute("INSERT INTO timers (token, timestamp) VALUES (?, ?)", (token, timestamp))
            conn.commit()
        finally:
            conn.close()

    return _write
