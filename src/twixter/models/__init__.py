"""Data models for twixter."""

from twixter.models.entry import (
    Entry,
    format_timestamp,
    parse_lines,
    parse_timestamp,
)
from twixter.models.source import Source

__all__ = [
    "Entry",
    "Source",
    "format_timestamp",
    "parse_lines",
    "parse_timestamp",
]
