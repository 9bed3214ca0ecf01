"""Time utilities for duracron."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

UTC = ZoneInfo("UTC")


def utc_now() -> datetime:
    """
    Get current UTC time (timezone-aware).

    Returns:
        Current UTC datetime
    """
    return datetime.now(UTC)


def get_timezone(tz_name: str) -> ZoneInfo:
    """
    Get timezone object from IANA timezone name.

    Args:
        tz_name: IANA timezone name (e.g., "Asia/Seoul", "America/New_York")

    Returns:
        Timezone object

    Raises:
        ValueError: Invalid timezone name
    """
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError, TypeError) as e:
        raise ValueError(f"Invalid timezone '{tz_name}': {e}") from e


def ensure_utc(value: datetime) -> datetime:
    """
    Normalize a datetime to timezone-aware UTC.

    Naive datetimes are assumed to already be in UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_iso(value: datetime) -> str:
    """Serialize a datetime as an ISO-8601 UTC string."""
    return ensure_utc(value).isoformat()


def parse_iso_datetime(value: str) -> datetime:
    """
    Parse an ISO-8601 string into a UTC datetime.

    Accepts a trailing 'Z' as UTC.

    Raises:
        ValueError: If the string is not a valid ISO-8601 timestamp
    """
    return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


def from_epoch_millis(millis: int | float | str) -> datetime:
    """Convert epoch milliseconds to a UTC datetime."""
    return datetime.fromtimestamp(int(millis) / 1000, tz=timezone.utc).astimezone(UTC)


def to_epoch_millis(value: datetime) -> int:
    """Convert a datetime to epoch milliseconds."""
    return int(ensure_utc(value).timestamp() * 1000)
