"""Elapsed-duration rendering."""

from __future__ import annotations

from enum import Enum

_MS_PER_SECOND = 1000

_UNITS = ("day", "hour", "minute", "second")


class DurationFormat(str, Enum):
    """Output encodings accepted by :func:`format_duration`."""

    RAW = "raw"
    HUMAN_READABLE = "human_readable"


def duration_parts(duration_ms: int) -> tuple[int, int, int, int]:
    """Split *duration_ms* into ``(days, hours, minutes, seconds)``.

    Hours, minutes and seconds are taken modulo 24, 60 and 60.  Durations
    under one second, negative ones included, yield all zeros.
    """
    seconds = duration_ms // _MS_PER_SECOND
    if seconds <= 0:
        return 0, 0, 0, 0
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24
    return days, hours % 24, minutes % 60, seconds % 60


def _pluralize(value: int, unit: str) -> str:
    return f"{value} {unit}" if value == 1 else f"{value} {unit}s"


def format_raw(duration_ms: int) -> str:
    """Format *duration_ms* as ``<N> milliseconds``, sign included."""
    return f"{duration_ms} milliseconds"


def format_human(duration_ms: int) -> str:
    """Format *duration_ms* as e.g. ``2 minutes, 15 seconds``."""
    parts = [
        _pluralize(value, unit)
        for value, unit in zip(duration_parts(duration_ms), _UNITS)
        if value
    ]
    return ", ".join(parts) if parts else "less than a second"


def format_duration(duration_ms: int, fmt: DurationFormat | str = DurationFormat.RAW) -> str:
    """Render *duration_ms* in the requested format.

    Raises ``ValueError`` for an unknown *fmt*.
    """
    if DurationFormat(fmt) is DurationFormat.HUMAN_READABLE:
        return format_human(duration_ms)
    return format_raw(duration_ms)
