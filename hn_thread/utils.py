from __future__ import annotations

from datetime import datetime, timedelta, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Return a timezone aware datetime in UTC.

    Naive values are assumed to already be in UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def timestamp_to_datetime(seconds: int) -> datetime:
    """
    Convert Unix seconds into an aware UTC datetime.

    Zero and negative values are valid and map onto (or before) the epoch.
    Raises OverflowError when the value does not fit in a datetime.
    """
    return EPOCH + timedelta(seconds=seconds)


def datetime_to_timestamp(dt: datetime) -> int:
    return int((ensure_utc(dt) - EPOCH).total_seconds())
