"""Utility functions for treefreeze."""

from datetime import datetime, timezone
from typing import Callable, Optional, Tuple
import re

from .constants import SNAPSHOT_TIME_FORMAT


# A clock returns the current time as a timezone-aware datetime
Clock = Callable[[], datetime]

_SNAPSHOT_NAME = re.compile(r"^(?P<stamp>\d{8}T\d{6}\.\d{6}Z)(?:-(?P<seq>[1-9]\d*))?$")


def utc_now() -> datetime:
    """Get current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_snapshot_name(moment: datetime, sequence: int = 0) -> str:
    """Render a snapshot file name from a point in time.

    Naive datetimes are assumed to be UTC.

    Examples:
        2026-10-19 12:00:00+00:00 -> "20261019T120000.000000Z"
        same moment, sequence 2   -> "20261019T120000.000000Z-2"
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    name = moment.astimezone(timezone.utc).strftime(SNAPSHOT_TIME_FORMAT)
    if sequence:
        name = f"{name}-{sequence}"
    return name


def parse_snapshot_name(name: str) -> Optional[Tuple[datetime, int]]:
    """Parse a snapshot file name into (timestamp, sequence).

    Returns None for names that are not snapshot names.
    """
    match = _SNAPSHOT_NAME.match(name)
    if not match:
        return None
    try:
        stamp = datetime.strptime(match.group("stamp"), SNAPSHOT_TIME_FORMAT)
    except ValueError:
        # Right shape, impossible date (e.g. month 13)
        return None
    sequence = int(match.group("seq") or 0)
    return stamp.replace(tzinfo=timezone.utc), sequence


def humanize_date(moment: datetime, now: Optional[datetime] = None) -> str:
    """Convert a timestamp to human-readable relative time.

    Examples:
        two hours before now -> "2 hours ago"
        five days before now -> "5 days ago"
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    now = now or utc_now()
    seconds = (now - moment).total_seconds()

    if seconds < 60:
        return "just now"
    elif seconds < 3600:  # Less than 1 hour
        minutes = int(seconds / 60)
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    elif seconds < 86400:  # Less than 1 day
        hours = int(seconds / 3600)
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    elif seconds < 604800:  # Less than 1 week
        days = int(seconds / 86400)
        return f"{days} day{'s' if days != 1 else ''} ago"
    elif seconds < 2592000:  # Less than 30 days
        weeks = int(seconds / 604800)
        return f"{weeks} week{'s' if weeks != 1 else ''} ago"
    elif seconds < 31536000:  # Less than 1 year
        months = int(seconds / 2592000)
        return f"{months} month{'s' if months != 1 else ''} ago"
    else:
        years = int(seconds / 31536000)
        return f"{years} year{'s' if years != 1 else ''} ago"


def printable_path(path: str) -> str:
    """Render a path for terminal output.

    Undecodable filename bytes (kept as lone surrogates in fingerprint keys)
    are shown as ``\\xNN`` escapes instead of failing to encode.
    """
    try:
        raw = path.encode("utf-8", "surrogateescape")
    except UnicodeEncodeError:
        return path.encode("utf-8", "backslashreplace").decode("utf-8")
    return raw.decode("utf-8", "backslashreplace")
