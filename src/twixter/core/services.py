"""
Facade service for the twixter commands.

The CLI talks to TimelineService only; it wires the fetcher, merger,
renderer and publisher together for one loaded configuration.

Example:
    from twixter.config import load_config_from_yaml
    from twixter.core.services import TimelineService

    service = TimelineService(load_config_from_yaml("config.yaml"))
    for line in service.timeline():
        print(line)
"""

from datetime import datetime
from typing import Optional

from twixter.config import Config
from twixter.core.fetcher import FeedFetcher, FetchStats, create_fetcher
from twixter.core.publisher import follow, publish
from twixter.core.timeline import produce_timeline
from twixter.logger import get_logger
from twixter.models import Entry


class TimelineService:
    """Facade over timeline aggregation and posting."""

    def __init__(self, config: Config, fetcher: Optional[FeedFetcher] = None):
        """Initialize timeline service.

        Args:
            config: Loaded configuration
            fetcher: Optional fetcher; a configured one is created when omitted
        """
        self.config = config
        self._fetcher = fetcher or create_fetcher(config.fetcher)
        self._logger = get_logger(__name__)

    @property
    def stats(self) -> FetchStats:
        """Fetch statistics accumulated by this service."""
        return self._fetcher.stats

    def timeline(
        self,
        limit: Optional[int] = None,
        absolute: Optional[bool] = None,
        now: Optional[datetime] = None,
    ) -> list[str]:
        """Return the rendered timeline, newest first.

        Args:
            limit: Override the configured display limit
            absolute: Override the configured absolute-time flag
            now: Reference time for relative timestamps
        """
        lines = produce_timeline(
            self.config,
            now=now,
            fetcher=self._fetcher,
            limit=limit,
            absolute=absolute,
        )
        if self.stats.failed_fetches:
            self._logger.info(
                f"{self.stats.failed_fetches} of {self.stats.total_feeds} feeds could not be fetched"
            )
        return lines

    def tweet(self, content: str) -> Entry:
        """Append a post to the local feed."""
        return publish(self.config, content)

    def follow(self, config_path: str, nick: str, url: str) -> dict[str, str]:
        """Add a source to the configuration file and to this service."""
        following = follow(config_path, nick, url)
        self.config.following = dict(following)
        return following


def create_timeline_service(config: Config) -> TimelineService:
    """Create a TimelineService for ``config``.

    Args:
        config: Loaded configuration

    Returns:
        Configured TimelineService
    """
    return TimelineService(config)
