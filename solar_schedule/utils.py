"""Utility functions for working with absolute (UTC) instants."""

from datetime import datetime, timedelta, timezone


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def ensure_utc(instant: datetime) -> datetime:
    """
    Normalise an aware datetime to UTC.

    Args:
        instant: Timezone-aware datetime

    Returns:
        The same instant with ``tzinfo=timezone.utc``

    Raises:
        ValueError: If the datetime is naive
    """
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise ValueError(f"Expected a timezone-aware datetime, got naive {instant!r}")
    return instant.astimezone(timezone.utc)


def to_epoch_ms(instant: datetime) -> int:
    """Milliseconds since the Unix epoch, truncated."""
    delta = ensure_utc(instant) - EPOCH
    return (delta.days * 86_400_000) + (delta.seconds * 1000) + (delta.microseconds // 1000)


def from_epoch_ms(value: int) -> datetime:
    """Inverse of :func:`to_epoch_ms`."""
    return EPOCH + timedelta(milliseconds=int(value))
