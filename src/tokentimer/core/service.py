"""Timer Service: start, check, delete and list timers against a store."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from tokentimer.core.duration import DurationFormat, format_duration
from tokentimer.core.schema import Corrupted, NotPresent, Valid, validate, validate_all
from tokentimer.core.store import TimerStore
from tokentimer.core.timer import TimerError, to_iso

logger = structlog.get_logger(__name__)


class Outcome(Enum):
    """What an operation did, independent of its message text."""

    STARTED = "started"
    ALREADY_EXISTS = "already_exists"
    ELAPSED = "elapsed"
    NOT_FOUND = "not_found"
    CORRUPTED = "corrupted"
    DELETED = "deleted"
    LISTED = "listed"
    FAILED = "failed"


_OK_OUTCOMES = frozenset(
    {Outcome.STARTED, Outcome.ALREADY_EXISTS, Outcome.ELAPSED, Outcome.DELETED, Outcome.LISTED}
)


@dataclass(frozen=True)
class TimerResponse:
    """Structured result of a service operation."""

    outcome: Outcome
    message: str
    timestamp: int | None = None
    elapsed_ms: int | None = None
    entries: tuple[dict[str, str], ...] = ()

    @property
    def ok(self) -> bool:
        return self.outcome in _OK_OUTCOMES


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def _corrupted(token: str) -> TimerResponse:
    return TimerResponse(
        Outcome.CORRUPTED,
        f"Timer data for token '{token}' is corrupted. Please contact an administrator.",
    )


def _require_token(token: Any) -> None:
    if not isinstance(token, str) or not token:
        raise ValueError(f"token must be a non-empty string, got {token!r}")


class TimerService:
    """Orchestrates the timer operations over a :class:`TimerStore`.

    Absent and corrupted rows are ordinary outcomes reported in the
    returned :class:`TimerResponse`.  Store failures (a lost insert race,
    an unreadable database) are logged and reported as
    :attr:`Outcome.FAILED` for that one call.
    """

    def __init__(self, store: TimerStore) -> None:
        self._store = store

    # -- public API ----------------------------------------------------------

    def start(self, token: str) -> TimerResponse:
        """Start a timer for *token* unless one is already stored."""
        _require_token(token)
        try:
            result = validate(self._store.get(token))
            if isinstance(result, Valid):
                existing = result.timer
                return TimerResponse(
                    Outcome.ALREADY_EXISTS,
                    f"Timer for token '{token}' already exists. Started at: {existing.started_at}",
                    timestamp=existing.timestamp,
                )
            if isinstance(result, Corrupted):
                logger.warning("corrupted_timer", token=token, operation="start", row=result.row)
                return _corrupted(token)

            timestamp = _now_ms()
            self._store.insert(token, timestamp)
        except TimerError as exc:
            return self._failed("start", token, exc)

        logger.info("timer_started", token=token, timestamp=timestamp)
        return TimerResponse(
            Outcome.STARTED,
            f"Timer for token '{token}' started at: {to_iso(timestamp)}",
            timestamp=timestamp,
        )

    def check(self, token: str, fmt: DurationFormat | str = DurationFormat.RAW) -> TimerResponse:
        """Report the time elapsed since *token* was started.

        Elapsed time is not clamped: if the clock moved backwards since the
        start, a negative raw value is reported as-is.
        """
        _require_token(token)
        fmt = DurationFormat(fmt)
        try:
            result = validate(self._store.get(token))
        except TimerError as exc:
            return self._failed("check", token, exc)

        if isinstance(result, NotPresent):
            return TimerResponse(Outcome.NOT_FOUND, f"No timer found for token '{token}'.")
        if isinstance(result, Corrupted):
            logger.warning("corrupted_timer", token=token, operation="check", row=result.row)
            return _corrupted(token)

        elapsed = _now_ms() - result.timer.timestamp
        return TimerResponse(
            Outcome.ELAPSED,
            f"Elapsed time for token '{token}': {format_duration(elapsed, fmt)}.",
            timestamp=result.timer.timestamp,
            elapsed_ms=elapsed,
        )

    def delete(self, token: str) -> TimerResponse:
        """Delete the row for *token*, whether or not it is well-formed."""
        _require_token(token)
        try:
            removed = self._store.delete(token)
        except TimerError as exc:
            return self._failed("delete", token, exc)

        if not removed:
            return TimerResponse(
                Outcome.NOT_FOUND, f"No timer found for token '{token}' to delete."
            )
        logger.info("timer_deleted", token=token)
        return TimerResponse(Outcome.DELETED, f"Timer for token '{token}' deleted successfully.")

    def list_timers(self) -> TimerResponse:
        """List every stored timer with its ISO start time.

        The scan is validated as a whole: a single corrupted row empties
        the listing.
        """
        try:
            result = validate_all(self._store.scan_all())
        except TimerError as exc:
            return self._failed("list", None, exc)

        if isinstance(result, Corrupted):
            logger.warning("listing_suppressed", corrupted_token=result.token, row=result.row)
            return TimerResponse(Outcome.LISTED, "No timers listed: stored timer data is corrupted.")

        entries = tuple(
            {"token": valid.timer.token, "startTime": valid.timer.started_at} for valid in result
        )
        return TimerResponse(Outcome.LISTED, f"{len(entries)} timer(s).", entries=entries)

    # -- private helpers -----------------------------------------------------

    def _failed(self, operation: str, token: str | None, exc: TimerError) -> TimerResponse:
        logger.error("operation_failed", operation=operation, token=token, error=str(exc))
        target = f"timer for token '{token}'" if token is not None else "timers"
        return TimerResponse(Outcome.FAILED, f"Failed to {operation} {target}: {exc}")
