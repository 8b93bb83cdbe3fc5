"""
Date handling utilities for task parsing.

Relative due dates resolve to a fixed hour of the day in the team's
local timezone and are emitted as timezone-aware ISO 8601 strings.
Without a configured zone the system clock's wall time is used and the
UTC offset is worked out for the target date, so a DST change between
now and the due date keeps the hour.
"""

from datetime import datetime, time, timedelta
import logging
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


def local_now(timezone: Optional[str] = None) -> datetime:
    """
    Current time in the team's timezone.

    Args:
        timezone: IANA zone name; the system local zone is used when omitted

    Returns:
        Aware datetime for a named zone, otherwise naive system wall-clock time
    """
    if timezone:
        try:
            return datetime.now(ZoneInfo(timezone))
        except ZoneInfoNotFoundError:
            logger.error(f"Unknown timezone '{timezone}', using system local time")
    return datetime.now()


def due_at_hour(now: datetime, days_ahead: int = 0, hour: int = 17) -> datetime:
    """
    Calendar day ``days_ahead`` after ``now`` at ``hour``:00:00.

    An aware ``now`` keeps its tzinfo, and a ZoneInfo zone picks the offset
    in force on the target date. A naive ``now`` is system local time and
    is localised after the arithmetic.
    """
    target = datetime.combine(now.date() + timedelta(days=days_ahead), time(hour))
    if now.tzinfo is None:
        return target.astimezone()
    return target.replace(tzinfo=now.tzinfo)


def format_iso_date(dt: datetime) -> str:
    """Format a datetime as ISO 8601, assuming local time when naive."""
    if not dt.tzinfo:
        dt = dt.astimezone()
    return dt.isoformat()


def parse_iso_date(date_str: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO 8601 string, accepting a trailing ``Z``.

    Returns None when the string is empty or not ISO formatted.
    """
    if not date_str or not isinstance(date_str, str):
        return None
    candidate = date_str.strip()
    if candidate.endswith(("Z", "z")):
        candidate = candidate[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(candidate)
    except ValueError:
        return None


def is_valid_iso_date(date_str: Optional[str]) -> bool:
    return parse_iso_date(date_str) is not None
