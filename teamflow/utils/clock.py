from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """
    Normalise a datetime read back from the database to aware UTC.

    Some backends (SQLite) drop tzinfo from DateTime(timezone=True)
    columns; naive values are stored as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_expired(expires_at: datetime) -> bool:
    return utcnow() > as_utc(expires_at)
