"""UTC storage, shop-local reporting.

Timestamps are stored and compared in UTC. Month and week boundaries are a
property of the shop's wall clock, so the bucketer converts to the configured
local zone before looking at day numbers.
"""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def now_utc() -> datetime:
    """
    Current time in UTC.

    Use this instead of datetime.now() everywhere.
    """
    return datetime.now(timezone.utc)


def get_zone(tz_name: str) -> ZoneInfo:
    """
    Look up an IANA zone by name.

    Raises:
        ValueError: If the zone name is unknown
    """
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone: {tz_name}")


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    Raises ValueError if datetime is naive (no timezone).
    """
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot convert naive datetime to UTC. Datetime must be timezone-aware."
        )
    return dt.astimezone(timezone.utc)


def to_local(dt: datetime, tz_name: str) -> datetime:
    """
    Convert an aware datetime to the shop's local zone.

    Naive datetimes are taken to already be shop-local wall time and are
    only tagged with the zone.

    Args:
        dt: Datetime to convert
        tz_name: IANA timezone name (e.g., "America/Sao_Paulo")
    """
    zone = get_zone(tz_name)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=zone)
    return dt.astimezone(zone)


def local_now(tz_name: str) -> datetime:
    """Current wall-clock time in the shop's zone."""
    return now_utc().astimezone(get_zone(tz_name))


def parse_iso(iso_string: str) -> datetime:
    """
    Parse ISO 8601 datetime string to UTC datetime.

    Raises ValueError if string has no timezone info.
    """
    dt = datetime.fromisoformat(iso_string)
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot parse naive datetime string. "
            "Include timezone offset (e.g., 'Z' or '+00:00')."
        )
    return to_utc(dt)
