"""
twtxt feed fetcher for HTTP URLs and local files.

A failing source never raises: it yields a failed FetchResult with no entries
so that the remaining sources are still aggregated.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

import httpx

from twixter.config import FetcherConfig, get_config
from twixter.logger import get_logger
from twixter.models import Entry, Source, parse_lines

logger = get_logger(__name__)


@dataclass
class FetchResult:
    """Result of a feed fetch operation."""

    success: bool
    source: Source
    entries: list[Entry] = field(default_factory=list)
    error: Optional[str] = None
    fetch_time_seconds: float = 0.0
    http_status: Optional[int] = None

    def __post_init__(self):
        """Validate fetch result."""
        if self.success and self.error:
            raise ValueError("Successful fetch cannot have an error")
        if not self.success and self.entries:
            raise ValueError("Failed fetch cannot have entries")
        if not self.success and not self.error:
            self.error = "Unknown error"

    @property
    def entries_count(self) -> int:
        return len(self.entries)


@dataclass
class FetchStats:
    """Statistics for feed fetching operations."""

    total_feeds: int = 0
    successful_fetches: int = 0
    failed_fetches: int = 0
    total_entries: int = 0
    total_time_seconds: float = 0.0
    errors_by_type: dict = field(default_factory=dict)

    def add_result(self, result: FetchResult) -> None:
        """Add a fetch result to statistics.

        Args:
            result: FetchResult to add
        """
        self.total_feeds += 1
        self.total_time_seconds += result.fetch_time_seconds

        if result.success:
            self.successful_fetches += 1
            self.total_entries += result.entries_count
        else:
            self.failed_fetches += 1
            error_type = result.error.split(":")[0] if result.error else "unknown"
            self.errors_by_type[error_type] = self.errors_by_type.get(error_type, 0) + 1

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        if self.total_feeds == 0:
            return 0.0
        return self.successful_fetches / self.total_feeds


class FeedFetcher:
    """twtxt feed fetcher; one attempt per source, no retries."""

    def __init__(
        self,
        config: Optional[FetcherConfig] = None,
        timeout_seconds: Optional[float] = None,
        user_agent: Optional[str] = None,
        max_workers: Optional[int] = None,
    ):
        """Initialize feed fetcher.

        Args:
            config: Fetcher settings; the global configuration is used when omitted
            timeout_seconds: Request timeout in seconds
            user_agent: User-Agent header for HTTP requests
            max_workers: Maximum number of sources fetched concurrently
        """
        config = config or get_config().fetcher

        self.timeout_seconds = timeout_seconds or config.timeout_seconds
        self.user_agent = user_agent or config.user_agent
        self.max_workers = max_workers or config.max_workers

        # HTTP client configuration
        self.follow_redirects = config.follow_redirects
        self.max_redirects = config.max_redirects

        self.stats = FetchStats()
        self._stats_lock = threading.Lock()

    def fetch(self, source: Source) -> FetchResult:
        """Fetch and parse a single source.

        Args:
            source: Source to fetch

        Returns:
            FetchResult with entries or error
        """
        start_time = time.time()
        http_status = None

        logger.debug(f"Fetching feed: {source.label} ({source.locator})")

        try:
            if source.is_remote:
                response = self._fetch_http(source.locator)
                http_status = response.status_code
                body = response.text
            else:
                body = self._read_file(source.locator)

        except httpx.TimeoutException as e:
            error = f"Timeout: {e}"

        except httpx.HTTPStatusError as e:
            http_status = e.response.status_code
            error = f"HTTP {http_status}: {e}"

        except httpx.RequestError as e:
            error = f"Request error: {e}"

        except (OSError, UnicodeDecodeError) as e:
            error = f"Read error: {type(e).__name__}: {e}"

        else:
            entries = parse_lines(body, author=source.label)
            fetch_time = time.time() - start_time
            logger.info(
                f"Fetched {len(entries)} entries from {source.label} in {fetch_time:.2f}s"
            )
            result = FetchResult(
                success=True,
                source=source,
                entries=entries,
                fetch_time_seconds=fetch_time,
                http_status=http_status,
            )
            self._record(result)
            return result

        logger.warning(f"Skipping {source.label} ({source.locator}): {error}")
        result = FetchResult(
            success=False,
            source=source,
            error=error,
            fetch_time_seconds=time.time() - start_time,
            http_status=http_status,
        )
        self._record(result)
        return result

    def _record(self, result: FetchResult) -> None:
        with self._stats_lock:
            self.stats.add_result(result)

    def fetch_entries(self, source: Source) -> list[Entry]:
        """Fetch a source and return its entries, empty on failure."""
        return self.fetch(source).entries

    def fetch_multiple(self, sources: list[Source]) -> list[FetchResult]:
        """Fetch several sources concurrently.

        Args:
            sources: Sources to fetch

        Returns:
            FetchResult per source, in the order of ``sources``
        """
        if not sources:
            return []

        workers = min(self.max_workers, len(sources))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="twixter-fetch") as pool:
            results = list(pool.map(self.fetch, sources))

        logger.debug(
            f"Fetched {self.stats.total_feeds} feeds: {self.stats.successful_fetches} ok, "
            f"{self.stats.failed_fetches} failed, {self.stats.total_entries} entries"
        )
        return results

    def _fetch_http(self, url: str) -> httpx.Response:
        """Fetch URL with HTTP client.

        Args:
            url: URL to fetch

        Returns:
            httpx Response

        Raises:
            httpx.TimeoutException: On timeout
            httpx.HTTPStatusError: On HTTP error
            httpx.RequestError: On network error
        """
        headers = {"User-Agent": self.user_agent}

        with httpx.Client(
            timeout=self.timeout_seconds,
            follow_redirects=self.follow_redirects,
            max_redirects=self.max_redirects,
        ) as client:
            response = client.get(url, headers=headers)
            response.raise_for_status()
            return response

    def _read_file(self, locator: str) -> str:
        """Read a local feed from a path or ``file://`` URL.

        Raises:
            OSError: If the file cannot be read
            UnicodeDecodeError: If the file is not UTF-8
        """
        parsed = urlparse(locator)
        if parsed.scheme == "file":
            path = Path(unquote(parsed.path))
        else:
            path = Path(locator).expanduser()

        with path.open("r", encoding="utf-8", newline="") as f:
            return f.read()


def create_fetcher(
    config: Optional[FetcherConfig] = None,
    timeout_seconds: Optional[float] = None,
    max_workers: Optional[int] = None,
) -> FeedFetcher:
    """Create a configured FeedFetcher instance.

    Args:
        config: Fetcher settings; defaults to the global configuration
        timeout_seconds: Override default timeout
        max_workers: Override default worker count

    Returns:
        Configured FeedFetcher instance
    """
    return FeedFetcher(config=config, timeout_seconds=timeout_seconds, max_workers=max_workers)
