"""
Entry data model for twtxt feed records.

A record is one line of a twtxt file::

    2016-02-04T13:30:00+01:00<TAB>Hello world!

Everything before the first tab is an RFC 3339 timestamp with an explicit
UTC offset; everything after it is the post content, kept verbatim.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field

SEPARATOR = "\t"

_RFC3339_RE = re.compile(
    r"""
    ^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})
    [Tt\ ]
    (?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})
    (?:\.(?P<fraction>\d+))?
    (?P<offset>[Zz]|(?P<sign>[+-])(?P<off_hour>\d{2}):(?P<off_minute>\d{2}))$
    """,
    re.VERBOSE | re.ASCII,
)


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp, keeping its UTC offset.

    Args:
        value: Timestamp text such as ``2016-02-04T13:30:00+01:00``

    Returns:
        Timezone-aware datetime, or None if the text is not a valid
        RFC 3339 timestamp with an explicit offset
    """
    match = _RFC3339_RE.match(value)
    if not match:
        return None

    fraction = match.group("fraction") or ""
    microsecond = int(fraction[:6].ljust(6, "0")) if fraction else 0

    if match.group("offset") in ("Z", "z"):
        tz = timezone.utc
    else:
        off_hour = int(match.group("off_hour"))
        off_minute = int(match.group("off_minute"))
        if off_hour > 23 or off_minute > 59:
            return None
        offset = timedelta(hours=off_hour, minutes=off_minute)
        tz = timezone(-offset if match.group("sign") == "-" else offset)

    try:
        return datetime(
            int(match.group("year")),
            int(match.group("month")),
            int(match.group("day")),
            int(match.group("hour")),
            int(match.group("minute")),
            int(match.group("second")),
            microsecond,
            tzinfo=tz,
        )
    except ValueError:
        return None


def format_timestamp(value: datetime) -> str:
    """Format a datetime as RFC 3339 to second precision, ``Z`` for UTC."""
    text = value.isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


class Entry(BaseModel):
    """One post of a twtxt feed.

    Entries order by ``timestamp`` alone; ``author`` and ``content`` never
    take part in comparisons.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: AwareDatetime = Field(..., description="Post time with its published offset")
    author: Optional[str] = Field(None, description="Display label of the source")
    content: str = Field(..., description="Raw post text")

    @classmethod
    def parse(cls, line: str, author: Optional[str] = None) -> Optional["Entry"]:
        """Parse one feed line into an Entry.

        Args:
            line: Raw record without its trailing newline
            author: Label of the source the line was read from

        Returns:
            Entry, or None if the line has no tab or no valid timestamp
        """
        prefix, sep, content = line.partition(SEPARATOR)
        if not sep:
            return None

        timestamp = parse_timestamp(prefix)
        if timestamp is None:
            return None

        return cls(timestamp=timestamp, author=author, content=content)

    @classmethod
    def compose(cls, content: str, author: Optional[str] = None) -> "Entry":
        """Create a new entry stamped with the current local time."""
        now = datetime.now().astimezone().replace(microsecond=0)
        return cls(timestamp=now, author=author, content=content)

    def serialize(self) -> str:
        """Return the record line for this entry, newline included."""
        return f"{format_timestamp(self.timestamp)}{SEPARATOR}{self.content}\n"

    def __lt__(self, other: "Entry") -> bool:
        if not isinstance(other, Entry):
            return NotImplemented
        return self.timestamp < other.timestamp

    def __le__(self, other: "Entry") -> bool:
        if not isinstance(other, Entry):
            return NotImplemented
        return self.timestamp <= other.timestamp

    def __gt__(self, other: "Entry") -> bool:
        if not isinstance(other, Entry):
            return NotImplemented
        return self.timestamp > other.timestamp

    def __ge__(self, other: "Entry") -> bool:
        if not isinstance(other, Entry):
            return NotImplemented
        return self.timestamp >= other.timestamp

    def __repr__(self) -> str:
        return (
            f"<Entry(timestamp='{format_timestamp(self.timestamp)}', "
            f"author={self.author!r}, content={self.content!r})>"
        )


def parse_lines(text: str, author: Optional[str] = None) -> list[Entry]:
    """Parse a feed body into entries, skipping lines that are not records.

    Only ``\\n`` ends a record; a ``\\r`` left over from CRLF line endings is
    dropped, any other character belongs to the content.

    Args:
        text: Whole feed body
        author: Label attached to every parsed entry

    Returns:
        Entries in file order
    """
    entries = []
    for line in text.split("\n"):
        if line.endswith("\r"):
            line = line[:-1]
        entry = Entry.parse(line, author)
        if entry is not None:
            entries.append(entry)
    return entries
