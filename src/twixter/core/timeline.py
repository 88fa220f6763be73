"""
Timeline merger: combines every followed feed and the user's own feed into
one reverse-chronological, bounded list of entries.
"""

import heapq
import itertools
from datetime import datetime, timezone
from typing import Optional

from twixter.config import Config, FetcherConfig
from twixter.core.fetcher import FeedFetcher, create_fetcher
from twixter.core.render import render_entry
from twixter.logger import get_logger
from twixter.models import Entry, Source

logger = get_logger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class TimelineHeap:
    """Max-priority queue of entries, newest first.

    Entries with equal timestamps pop in insertion order, which makes the
    output deterministic for a fixed input.
    """

    def __init__(self):
        self._heap: list = []
        self._counter = itertools.count()

    def __len__(self) -> int:
        return len(self._heap)

    def push(self, entry: Entry) -> None:
        # heapq is a min-heap: the newest entry has the smallest key.
        key = _EPOCH - entry.timestamp
        heapq.heappush(self._heap, (key, next(self._counter), entry))

    def extend(self, entries) -> None:
        for entry in entries:
            self.push(entry)

    def pop(self) -> Entry:
        return heapq.heappop(self._heap)[2]

    def take(self, limit: int) -> list[Entry]:
        """Pop up to ``limit`` of the newest entries."""
        return [self.pop() for _ in range(min(limit, len(self._heap)))]


def build_sources(config: Config) -> list[Source]:
    """Return the sources of one timeline run.

    Followed feeds come first in configuration order, then the user's own
    feed labeled with their nickname.

    Raises:
        ConfigError: If the twtxt or following section is missing
    """
    twtxt = config.require_twtxt()
    following = config.require_following()

    sources = [Source(label=nick, locator=url) for nick, url in following.items()]
    sources.append(Source(label=twtxt.nick, locator=twtxt.twturl))
    return sources


def merge(
    sources: list[Source],
    limit: int,
    fetcher: Optional[FeedFetcher] = None,
    fetcher_config: Optional[FetcherConfig] = None,
) -> list[Entry]:
    """Fetch all sources and select the newest entries.

    Args:
        sources: Feeds to aggregate
        limit: Maximum number of entries to return
        fetcher: Fetcher to use; one is created from ``fetcher_config`` when omitted
        fetcher_config: Settings for the created fetcher

    Returns:
        At most ``limit`` entries, newest first
    """
    if limit < 0:
        raise ValueError(f"Timeline limit must not be negative: {limit}")
    if limit == 0:
        return []

    fetcher = fetcher or create_fetcher(fetcher_config)
    timeline = TimelineHeap()

    for result in fetcher.fetch_multiple(sources):
        timeline.extend(result.entries)

    logger.debug(f"Selecting {limit} of {len(timeline)} entries from {len(sources)} sources")
    return timeline.take(limit)


def produce_timeline(
    config: Config,
    now: Optional[datetime] = None,
    fetcher: Optional[FeedFetcher] = None,
    limit: Optional[int] = None,
    absolute: Optional[bool] = None,
) -> list[str]:
    """Build the rendered timeline for ``config``.

    Args:
        config: Loaded configuration with twtxt and following sections
        now: Reference time for relative timestamps; defaults to the
            current local time
        fetcher: Fetcher to use; one is built from ``config.fetcher`` when omitted
        limit: Override ``twtxt.limit_timeline``
        absolute: Override ``twtxt.use_abs_time``

    Returns:
        One display string per entry, newest first

    Raises:
        ConfigError: If the configuration lacks required sections
    """
    twtxt = config.require_twtxt()
    sources = build_sources(config)

    limit = twtxt.limit_timeline if limit is None else limit
    absolute = twtxt.use_abs_time if absolute is None else absolute
    now = now or datetime.now().astimezone()

    entries = merge(sources, limit, fetcher=fetcher, fetcher_config=config.fetcher)
    return [render_entry(entry, now, absolute) for entry in entries]
