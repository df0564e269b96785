from datetime import datetime, timezone
import pytz


def get_current_datetime(timezone_str: str = "UTC") -> datetime:
    """Returns the current time in the given timezone.

    Args:
        timezone_str: The timezone to use (default: "UTC").

    Returns:
        A timezone-aware datetime. Unknown timezones fall back to UTC.
    """
    try:
        tz = pytz.timezone(timezone_str)
    except pytz.UnknownTimeZoneError:
        return datetime.now(timezone.utc)
    return datetime.now(tz)


def utc_now() -> datetime:
    """Server-assigned timestamp for stored records."""
    return datetime.now(timezone.utc)
