"""
Timeline rendering: absolute timestamps and "N units ago" durations.
"""

from datetime import datetime, timedelta

from twixter.logger import get_logger
from twixter.models import Entry, format_timestamp

logger = get_logger(__name__)

# Checked in order; the first unit with a whole count of at least one wins.
DURATION_UNITS = (
    ("year", timedelta(days=365)),
    ("month", timedelta(days=30)),
    ("week", timedelta(weeks=1)),
    ("day", timedelta(days=1)),
    ("hour", timedelta(hours=1)),
    ("minute", timedelta(minutes=1)),
)


def format_duration(duration: timedelta) -> str:
    """Format a time duration in human readable format.

    Shows the count of the largest whole unit among year (365 days),
    month (30 days), week, day, hour and minute. Durations shorter than one
    minute, and negative ones, read "just now".

    Args:
        duration: Elapsed time

    Returns:
        Text such as "1 week ago", "3 months ago" or "just now"
    """
    for unit, length in DURATION_UNITS:
        count = duration // length
        if count >= 1:
            if count > 1:
                return f"{count} {unit}s ago"
            return f"{count} {unit} ago"
    return "just now"


def format_time(entry: Entry, now: datetime, absolute: bool) -> str:
    """Return the timestamp field shown for ``entry``.

    Args:
        entry: Entry to describe
        now: Invocation time, timezone-aware
        absolute: Show the timestamp in the offset of ``now`` instead of
            the elapsed time

    Returns:
        RFC 3339 timestamp or relative duration

    Raises:
        ValueError: If ``now`` is naive
    """
    if now.tzinfo is None or now.utcoffset() is None:
        raise ValueError("now must be timezone-aware")

    local = entry.timestamp.astimezone(now.tzinfo)
    if absolute:
        return format_timestamp(local)

    elapsed = now - local
    if elapsed < timedelta(0):
        logger.debug(f"Entry from {entry.author} is {-elapsed} in the future")
    return format_duration(elapsed)


def render_entry(entry: Entry, now: datetime, absolute: bool = False) -> str:
    """Format an entry for display in the terminal.

    The result starts with a blank line, then ``@author time`` and the
    content on its own line.
    """
    return f"\n@{entry.author or ''} {format_time(entry, now, absolute)}\n{entry.content}"
