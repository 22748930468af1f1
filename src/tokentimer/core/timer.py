"""Timer model: the stored record, its observable states and the error taxonomy."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Last millisecond representable by datetime (9999-12-31T23:59:59.999Z).
MAX_TIMESTAMP_MS = 253402300799999


class TimerState(Enum):
    """Observable states of a token in the store."""

    ABSENT = "absent"
    ACTIVE = "active"
    CORRUPTED = "corrupted"


class TimerError(Exception):
    """Base class for failures raised by the timer store."""


class ConstraintViolationError(TimerError):
    """Raised when an insert collides with an existing token."""


class StorageFaultError(TimerError):
    """Raised when the underlying database cannot be read or written."""


@dataclass(frozen=True)
class Timer:
    """A well-formed timer record.

    ``timestamp`` is the start instant in milliseconds since the Unix epoch.
    """

    token: str
    timestamp: int

    @property
    def started_at(self) -> str:
        """Return the start instant as an ISO-8601 UTC string."""
        return to_iso(self.timestamp)


def to_iso(timestamp_ms: int) -> str:
    """Render *timestamp_ms* as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    instant = _EPOCH + timedelta(milliseconds=timestamp_ms)
    return instant.isoformat(timespec="milliseconds").replace("+00:00", "Z")
