"""Timer Record Store: sqlite persistence for ``(token, timestamp)`` rows."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager, suppress
from pathlib import Path
from typing import Any

import structlog

from tokentimer.core.timer import ConstraintViolationError, StorageFaultError

logger = structlog.get_logger(__name__)

_BUSY_TIMEOUT_SECONDS = 5.0

_SCHEMA = """
CREATE TABLE IF NOT EXISTS timers (
    token TEXT PRIMARY KEY,
    timestamp INTEGER
)
"""


class TimerStore:
    """Durable keyed storage for timer rows.

    The connection is opened once and held for the lifetime of the store.
    Rows are returned exactly as sqlite holds them; no validation happens
    here.  Primary-key collisions surface as
    :class:`ConstraintViolationError`, every other database failure as
    :class:`StorageFaultError`.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = str(path)
        if self._path != ":memory:":
            Path(self._path).parent.mkdir(parents=True, exist_ok=True)
        with self._guard("open"):
            self._conn = sqlite3.connect(
                self._path,
                check_same_thread=False,
                isolation_level=None,
                timeout=_BUSY_TIMEOUT_SECONDS,
            )
            self._conn.row_factory = sqlite3.Row
            with suppress(sqlite3.Error):
                self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute(_SCHEMA)
        logger.debug("store_opened", path=self._path)

    @property
    def path(self) -> str:
        return self._path

    # -- operations ----------------------------------------------------------

    def get(self, token: str) -> dict[str, Any] | None:
        """Return the raw row for *token*, or ``None`` if absent."""
        with self._guard("get"):
            row = self._conn.execute(
                "SELECT token, timestamp FROM timers WHERE token = ?", (token,)
            ).fetchone()
        return dict(row) if row is not None else None

    def insert(self, token: str, timestamp: int) -> None:
        """Insert a new row.  Raises :class:`ConstraintViolationError` on a duplicate token."""
        with self._guard("insert"):
            try:
                self._conn.execute(
                    "INSERT INTO timers (token, timestamp) VALUES (?, ?)", (token, timestamp)
                )
            except sqlite3.IntegrityError as exc:
                raise ConstraintViolationError(
                    f"timer for token '{token}' already exists"
                ) from exc

    def delete(self, token: str) -> bool:
        """Delete the row for *token*; return whether a row was removed."""
        with self._guard("delete"):
            cursor = self._conn.execute("DELETE FROM timers WHERE token = ?", (token,))
        return cursor.rowcount > 0

    def scan_all(self) -> list[dict[str, Any]]:
        """Return every stored row in storage order."""
        with self._guard("scan"):
            rows = self._conn.execute("SELECT token, timestamp FROM timers").fetchall()
        return [dict(row) for row in rows]

    # -- lifecycle -----------------------------------------------------------

    def close(self) -> None:
        self._conn.close()
        logger.debug("store_closed", path=self._path)

    def __enter__(self) -> TimerStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- private helpers -----------------------------------------------------

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        """Translate ``sqlite3.Error`` into :class:`StorageFaultError`."""
        try:
            yield
        except sqlite3.Error as exc:
            raise StorageFaultError(f"{operation} failed on {self._path}: {exc}") from exc
