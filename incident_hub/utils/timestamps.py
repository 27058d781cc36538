"""
Timestamp helpers shared by the stores and incident models.

Firestore hands back DatetimeWithNanoseconds, the JSON seed hands back ISO
strings; both end up as timezone-aware UTC datetimes.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value) -> Optional[datetime]:
    """
    Parse various timestamp formats to timezone-aware datetime (UTC).

    Returns None for anything that cannot be interpreted as a timestamp.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, str):
        try:
            # Handle ISO format with Z
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    # Protobuf-style Timestamp objects
    if hasattr(value, "ToDatetime"):
        return parse_timestamp(value.ToDatetime())
    return None


def sort_key_newest_first(value) -> float:
    """Sort key placing the newest timestamps first and missing ones last."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return float("inf")
    return -parsed.timestamp()
