"""Calendar-day keys for candidate dates.

Two timestamps that fall on the same calendar day share a key, whatever their
time of day. Aware timestamps are read in UTC, naive ones are taken to be UTC
already, so a date written to a TIMESTAMPTZ column and read back keeps its key.
"""

from datetime import UTC, date, datetime


def day_of(value: datetime | date) -> date:
    """Return the calendar day a timestamp falls on."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"expected date or datetime, got {type(value).__name__}")


def day_key(value: datetime | date) -> str:
    """Return the ``YYYY-MM-DD`` key for a timestamp."""
    return day_of(value).isoformat()


def as_timestamp(value: datetime | date) -> datetime:
    """Widen a bare date to midnight UTC; aware datetimes pass through."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
    return datetime(value.year, value.month, value.day, tzinfo=UTC)
