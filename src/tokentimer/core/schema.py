"""Classify raw store rows as absent, valid or corrupted.

Rows come straight out of sqlite, whose column affinity does not stop a
text or real value from landing in the ``timestamp`` column.  Validation
never raises: every input maps to exactly one of :class:`NotPresent`,
:class:`Valid` or :class:`Corrupted`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from tokentimer.core.timer import MAX_TIMESTAMP_MS, Timer, TimerState


@dataclass(frozen=True)
class NotPresent:
    """No row exists for the token."""

    state = TimerState.ABSENT


@dataclass(frozen=True)
class Valid:
    """The row is a well-formed timer."""

    timer: Timer
    state = TimerState.ACTIVE


@dataclass(frozen=True)
class Corrupted:
    """A row exists but does not describe a timer."""

    row: dict[str, Any] = field(default_factory=dict)
    state = TimerState.CORRUPTED

    @property
    def token(self) -> Any:
        return self.row.get("token")


Classification = Union[NotPresent, Valid, Corrupted]


def _is_token(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def _is_timestamp(value: Any) -> bool:
    # bool is a subclass of int and must not pass as a timestamp.
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return 0 <= value <= MAX_TIMESTAMP_MS


def validate(row: Mapping[str, Any] | None) -> Classification:
    """Classify a single raw row."""
    if row is None:
        return NotPresent()
    token = row.get("token")
    timestamp = row.get("timestamp")
    if _is_token(token) and _is_timestamp(timestamp):
        return Valid(Timer(token=token, timestamp=timestamp))
    return Corrupted(dict(row))


def validate_all(rows: Iterable[Mapping[str, Any]]) -> list[Valid] | Corrupted:
    """Validate a full scan as one batch.

    Returns the first :class:`Corrupted` row encountered, or the list of
    :class:`Valid` results when every row is well-formed.
    """
    valid: list[Valid] = []
    for row in rows:
        result = validate(row)
        if isinstance(result, Corrupted):
            return result
        valid.append(result)
    return valid
