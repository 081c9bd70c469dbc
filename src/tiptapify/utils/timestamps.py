"""Timestamp formatting for front matter and archive metadata."""

from __future__ import annotations

from datetime import datetime, timezone


def format_timestamp(value: datetime | str) -> str:
    """Format *value* as ISO-8601 UTC with millisecond precision.

    The output has the form ``2024-01-02T03:04:05.000Z``.  Naive datetimes
    are taken to be UTC already.  Strings are returned unchanged.

    Examples
    --------
    >>> format_timestamp(datetime(2024, 1, 2, 3, 4, 5, 678901))
    '2024-01-02T03:04:05.678Z'
    """
    if isinstance(value, str):
        return value
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
        f".{value.microsecond // 1000:03d}Z"
    )


def from_epoch_seconds(value: object) -> datetime | None:
    """Convert a Unix timestamp in seconds to an aware UTC datetime.

    Returns ``None`` for missing, non-numeric or out-of-range values.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        return datetime.fromtimestamp(float(value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None
