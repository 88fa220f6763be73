"""Unit tests for feed fetcher."""

from unittest.mock import MagicMock, Mock, patch

import httpx
import pytest

from twixter.config import FetcherConfig
from twixter.core.fetcher import FeedFetcher, FetchResult, FetchStats, create_fetcher
from twixter.models import Source

FEED_BODY = (
    "2016-02-04T13:30:00+01:00\tFirst post\n"
    "this line is not a record\n"
    "2016-02-05T09:00:00Z\tSecond post\n"
)


@pytest.fixture
def remote_source():
    """Create a remote source."""
    return Source(label="bob", locator="https://example.com/twtxt.txt")


@pytest.fixture
def mock_client():
    """Patch httpx.Client and return the client used as context manager."""
    with patch("twixter.core.fetcher.httpx.Client") as mock_client_class:
        client = MagicMock()
        client.__enter__ = Mock(return_value=client)
        client.__exit__ = Mock(return_value=False)
        mock_client_class.return_value = client
        yield client


def make_response(status_code=200, text=FEED_BODY):
    """Create a mock httpx response."""
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    return response


class TestFetchResult:
    """Tests for FetchResult dataclass."""

    def test_successful_result(self, remote_source):
        """Test creating a successful result."""
        result = FetchResult(success=True, source=remote_source)

        assert result.success is True
        assert result.error is None
        assert result.entries_count == 0

    def test_failed_result_default_error(self, remote_source):
        """Test that a failed result always carries an error."""
        result = FetchResult(success=False, source=remote_source)

        assert result.error == "Unknown error"

    def test_result_validation(self, remote_source):
        """Test result validation."""
        with pytest.raises(ValueError):
            FetchResult(success=True, source=remote_source, error="Should not have error")


class TestFetchStats:
    """Tests for FetchStats dataclass."""

    def test_add_results(self, remote_source):
        """Test adding successful and failed results."""
        stats = FetchStats()
        stats.add_result(FetchResult(success=True, source=remote_source, fetch_time_seconds=1.0))
        stats.add_result(
            FetchResult(success=False, source=remote_source, error="Timeout: slow", fetch_time_seconds=2.0)
        )

        assert stats.total_feeds == 2
        assert stats.successful_fetches == 1
        assert stats.failed_fetches == 1
        assert stats.total_time_seconds == 3.0
        assert stats.errors_by_type == {"Timeout": 1}
        assert stats.success_rate == 0.5

    def test_empty_success_rate(self):
        """Test success rate without results."""
        assert FetchStats().success_rate == 0.0


class TestFeedFetcher:
    """Tests for FeedFetcher."""

    def test_init(self):
        """Test fetcher initialization from config."""
        fetcher = FeedFetcher()

        assert fetcher.timeout_seconds > 0
        assert fetcher.max_workers >= 1
        assert fetcher.user_agent
        assert fetcher.stats.total_feeds == 0

    def test_init_with_custom_params(self):
        """Test fetcher initialization with custom parameters."""
        fetcher = FeedFetcher(timeout_seconds=3, user_agent="CustomAgent/1.0", max_workers=2)

        assert fetcher.timeout_seconds == 3
        assert fetcher.user_agent == "CustomAgent/1.0"
        assert fetcher.max_workers == 2

    def test_init_with_fetcher_config(self):
        """Test that explicit settings win over the global configuration."""
        config = FetcherConfig(
            timeout_seconds=1.5,
            user_agent="Feeds/2.0",
            follow_redirects=False,
            max_redirects=3,
            max_workers=4,
        )

        fetcher = FeedFetcher(config=config)

        assert fetcher.timeout_seconds == 1.5
        assert fetcher.user_agent == "Feeds/2.0"
        assert fetcher.follow_redirects is False
        assert fetcher.max_redirects == 3
        assert fetcher.max_workers == 4

    def test_create_fetcher_with_config(self):
        """Test the factory passes settings through, keeping overrides."""
        fetcher = create_fetcher(FetcherConfig(timeout_seconds=1.5, max_workers=4), max_workers=2)

        assert fetcher.timeout_seconds == 1.5
        assert fetcher.max_workers == 2

    def test_create_fetcher(self):
        """Test the factory function."""
        fetcher = create_fetcher(timeout_seconds=5)

        assert isinstance(fetcher, FeedFetcher)
        assert fetcher.timeout_seconds == 5

    def test_fetch_http_success(self, mock_client, remote_source):
        """Test successful remote fetch."""
        mock_client.get.return_value = make_response()

        result = FeedFetcher(user_agent="UA/1").fetch(remote_source)

        assert result.success is True
        assert result.http_status == 200
        assert [e.content for e in result.entries] == ["First post", "Second post"]
        assert all(e.author == "bob" for e in result.entries)
        mock_client.get.assert_called_once_with(
            "https://example.com/twtxt.txt", headers={"User-Agent": "UA/1"}
        )

    def test_fetch_http_timeout(self, mock_client, remote_source):
        """Test that a timeout yields no entries."""
        mock_client.get.side_effect = httpx.TimeoutException("Request timed out")

        result = FeedFetcher().fetch(remote_source)

        assert result.success is False
        assert result.entries == []
        assert "Timeout" in result.error
        assert mock_client.get.call_count == 1

    def test_fetch_http_status_error(self, mock_client, remote_source):
        """Test that a non-success status yields no entries."""
        request = httpx.Request("GET", remote_source.locator)
        response = httpx.Response(404, request=request)
        mock_response = make_response(status_code=404)
        mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "Not Found", request=request, response=response
        )
        mock_client.get.return_value = mock_response

        result = FeedFetcher().fetch(remote_source)

        assert result.success is False
        assert result.http_status == 404
        assert result.entries == []

    def test_fetch_http_connect_error(self, mock_client, remote_source):
        """Test that a network error yields no entries."""
        mock_client.get.side_effect = httpx.ConnectError("Connection refused")

        result = FeedFetcher().fetch(remote_source)

        assert result.success is False
        assert result.error.startswith("Request error")

    def test_fetch_local_path(self, tmp_path):
        """Test reading a feed from a local path."""
        feed = tmp_path / "twtxt.txt"
        feed.write_text(FEED_BODY, encoding="utf-8")

        result = FeedFetcher().fetch(Source(label="alice", locator=str(feed)))

        assert result.success is True
        assert result.http_status is None
        assert len(result.entries) == 2

    def test_fetch_file_url(self, tmp_path):
        """Test reading a feed from a file:// URL."""
        feed = tmp_path / "twtxt.txt"
        feed.write_text(FEED_BODY, encoding="utf-8")

        entries = FeedFetcher().fetch_entries(Source(label="alice", locator=feed.as_uri()))

        assert len(entries) == 2

    def test_fetch_missing_file(self, tmp_path):
        """Test that a missing file yields no entries."""
        result = FeedFetcher().fetch(Source(label="alice", locator=str(tmp_path / "nope.txt")))

        assert result.success is False
        assert result.entries == []
        assert "Read error" in result.error

    def test_fetch_undecodable_file(self, tmp_path):
        """Test that a non-UTF-8 file yields no entries."""
        feed = tmp_path / "twtxt.txt"
        feed.write_bytes(b"2016-02-04T13:30:00+01:00\t\xff\xfe\n")

        result = FeedFetcher().fetch(Source(label="alice", locator=str(feed)))

        assert result.success is False
        assert "UnicodeDecodeError" in result.error

    def test_fetch_multiple_keeps_order(self, tmp_path):
        """Test that results come back in source order."""
        sources = []
        for i in range(5):
            feed = tmp_path / f"feed{i}.txt"
            feed.write_text(f"2016-02-0{i + 1}T00:00:00Z\tpost {i}\n", encoding="utf-8")
            sources.append(Source(label=f"user{i}", locator=str(feed)))

        fetcher = FeedFetcher(max_workers=3)
        results = fetcher.fetch_multiple(sources)

        assert [r.source.label for r in results] == [s.label for s in sources]
        assert fetcher.stats.total_feeds == 5
        assert fetcher.stats.total_entries == 5

    def test_fetch_multiple_isolates_failures(self, tmp_path):
        """Test that one failing source does not affect the others."""
        feed = tmp_path / "ok.txt"
        feed.write_text(FEED_BODY, encoding="utf-8")
        sources = [
            Source(label="broken", locator=str(tmp_path / "missing.txt")),
            Source(label="ok", locator=str(feed)),
        ]

        fetcher = FeedFetcher()
        results = fetcher.fetch_multiple(sources)

        assert results[0].success is False
        assert results[1].success is True
        assert len(results[1].entries) == 2
        assert fetcher.stats.failed_fetches == 1

    def test_fetch_multiple_empty(self):
        """Test fetching no sources."""
        assert FeedFetcher().fetch_multiple([]) == []
